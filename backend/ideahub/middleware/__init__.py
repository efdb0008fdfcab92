"""
Idea Hub Backend — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    The request id is assigned first so the access log line and every log
    record emitted while handling the request can carry it.
"""
