"""Pydantic request/response schemas. Field names are snake_case in Python, camelCase on the wire."""
