"""
Idea Hub Backend — Idea, IdeaTag and Star Models
=================================================

What:  The primary content unit (`ideas`), its tag rows (`idea_tags`) and the
       per-user star markers (`stars`).

Table Design:
    - Tags are child rows rather than an array column so the "has any of these
      tags" filter is a portable EXISTS subquery.
    - `stars` / `forks` are denormalized counters, adjusted with UPDATE ...
      SET stars = stars + 1 alongside the Star row / fork insert.
    - `collaborator_count` is bumped only while it is below the cap, so two
      concurrent adds cannot both take the last slot.
    - Every child table cascades on idea deletion.

Query Patterns:
    - Public listing: WHERE visibility = 'PUBLIC' AND status = 'PUBLISHED'
      ORDER BY created_at DESC → idx_ideas_listing
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ideahub.database import Base, new_id, utcnow
from ideahub.models.enums import IdeaStatus, Visibility


class Idea(Base):
    """A shared project / proposal."""

    __tablename__ = "ideas"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    canvas_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    category: Mapped[str] = mapped_column(String(100), nullable=False)
    language: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    license: Mapped[str] = mapped_column(String(50), nullable=False, default="MIT")
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0.0")

    visibility: Mapped[str] = mapped_column(String(20), nullable=False, default=Visibility.PUBLIC.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=IdeaStatus.PUBLISHED.value)

    stars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    forks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Slots taken out of MAX_COLLABORATORS; reserved with a conditional UPDATE
    collaborator_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_fork: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    forked_from: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("ideas.id", ondelete="SET NULL"), nullable=True
    )

    last_edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_edited_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ─────────────────────────────────────────────────────
    # Always eager-loaded with selectinload(); lazy loading is not available
    # on an AsyncSession.
    author = relationship("User", foreign_keys=[author_id])
    tag_rows: Mapped[List["IdeaTag"]] = relationship(
        back_populates="idea",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="IdeaTag.name",
    )
    collaborators = relationship("Collaborator", back_populates="idea", passive_deletes=True)

    __table_args__ = (
        Index("idx_ideas_listing", "visibility", "status", "created_at"),
    )

    @property
    def tags(self) -> List[str]:
        return [row.name for row in self.tag_rows]

    def __repr__(self) -> str:
        return f"<Idea(id={self.id}, title='{self.title}', status='{self.status}')>"


class IdeaTag(Base):
    """One tag attached to one idea."""

    __tablename__ = "idea_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    idea_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    idea: Mapped["Idea"] = relationship(back_populates="tag_rows")

    __table_args__ = (
        UniqueConstraint("idea_id", "name", name="uq_idea_tags_idea_name"),
        Index("idx_idea_tags_name", "name"),
    )


class Star(Base):
    """Marks that a user starred an idea; one row per (user, idea)."""

    __tablename__ = "stars"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    idea_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "idea_id", name="uq_stars_user_idea"),
    )
