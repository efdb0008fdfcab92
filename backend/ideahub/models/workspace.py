"""
Workspace model.

A workspace pairs a rich-text `document` with a canvas `whiteboard`, both
stored as opaque JSON; this layer never looks inside them.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ideahub.database import Base, new_id, utcnow


def empty_document() -> dict:
    return {}


def empty_whiteboard() -> dict:
    return {"elements": [], "appState": {}}


class Workspace(Base):
    __tablename__ = "workspaces"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="Untitled")
    idea_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    document: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True, default=empty_document)
    whiteboard: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True, default=empty_whiteboard)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    idea = relationship("Idea")
    owner = relationship("User")

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, idea_id={self.idea_id}, archived={self.archived})>"
