"""
Idea Hub Backend — Response Envelopes
======================================

What:  One internal result type (ApiResult) and one renderer per entry-point
       family. Handlers and exception handlers never build JSON bodies by hand.

Families (picked from the request path):

    ROUTE     /api/...              success → {"success": true, "data": ..., "message"?}
                                    failure → {"success": false, "message": ...}
    FUNCTION  <functions_prefix>/.. success → {"data"?, <extra keys>, "success": true}
                                    failure → {"error": ...}
    BARE      /api/workspace...     success → the record itself
                                    failure → {"error": ...}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ideahub.config import settings

WORKSPACE_PREFIX = "/api/workspace"


class EnvelopeStyle(str, Enum):
    ROUTE = "route"
    FUNCTION = "function"
    BARE = "bare"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def style_for_path(path: str) -> EnvelopeStyle:
    if _under(path, settings.functions_prefix):
        return EnvelopeStyle.FUNCTION
    if _under(path, WORKSPACE_PREFIX):
        return EnvelopeStyle.BARE
    return EnvelopeStyle.ROUTE


@dataclass
class ApiResult:
    """
    Outcome of a handler before it is wrapped for the wire.

    Attributes:
        data:         Payload (pydantic models, lists, dicts). None omits the
                      "data" key in the FUNCTION family.
        status_code:  HTTP status of the reply.
        message:      Optional human-readable note.
        extra:        Additional top-level keys for the FUNCTION family
                      (pagination, count, user, token...).
    """

    data: Any = None
    status_code: int = 200
    message: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def render(self, style: EnvelopeStyle) -> JSONResponse:
        if style is EnvelopeStyle.BARE:
            body: Any = self.data
        elif style is EnvelopeStyle.FUNCTION:
            body = {}
            if self.data is not None:
                body["data"] = self.data
            body.update(self.extra)
            body["success"] = True
            if self.message is not None:
                body["message"] = self.message
        else:
            body = {"success": True, "data": self.data}
            if self.message is not None:
                body["message"] = self.message
        return JSONResponse(status_code=self.status_code, content=jsonable_encoder(body))


def render_error(
    style: EnvelopeStyle,
    status_code: int,
    message: str,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    if style is EnvelopeStyle.ROUTE:
        body: Dict[str, Any] = {"success": False, "message": message}
    else:
        body = {"error": message}
    return JSONResponse(status_code=status_code, content=body, headers=dict(headers) if headers else None)
