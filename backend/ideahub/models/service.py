"""
Service registry record.

A small catalog of deployable services (main app, workspace editor) with the
URL each one answers on per environment. Populated by `python -m ideahub.seed`
and read by the registry function; no request-time logic depends on it.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ideahub.database import Base, new_id, utcnow
from ideahub.models.enums import ServiceStatus


class Service(Base):
    __tablename__ = "services"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    port: Mapped[int] = mapped_column(Integer, nullable=False)
    health_path: Mapped[str] = mapped_column(String(255), nullable=False, default="/api/health")
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0.0")

    base_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    local_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    dev_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    prod_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    environment: Mapped[str] = mapped_column(String(20), nullable=False, default="development")

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ServiceStatus.UNKNOWN.value)
    last_heartbeat: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
