"""
Idea Hub Backend — Shared Schema Pieces
========================================

What:  The camelCase base model every schema derives from, plus the small
       shapes reused across entity families (pagination block, health body).

Serialization:
    Fields are declared in snake_case and exposed in camelCase through an
    alias generator. Handlers hand models to `jsonable_encoder`, which uses the
    aliases, so the wire format is always camelCase. `populate_by_name` lets
    services build models with the Python field names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    """Page metadata returned by paginated listings."""

    page: int
    limit: int
    total: int
    total_pages: int


class HealthResponse(CamelModel):
    """
    Body of GET /health and GET /api/health.

    `status` is "healthy" when the database answers SELECT 1 and "unhealthy"
    otherwise; the endpoint still answers 200 so probes can read the body.
    """

    status: str
    service: str
    version: str
    database: str
    timestamp: datetime
    uptime_seconds: float
