"""
Collaborator model: join rows between ideas and the users granted access.

At most MAX_COLLABORATORS rows per idea. The collaborator service reserves a
slot on `ideas.collaborator_count` in the same transaction as the insert.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ideahub.database import Base, new_id, utcnow
from ideahub.models.enums import CollaboratorRole

MAX_COLLABORATORS = 3


class Collaborator(Base):
    __tablename__ = "idea_collaborators"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    idea_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=CollaboratorRole.VIEWER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    idea = relationship("Idea", back_populates="collaborators")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uq_idea_collaborators_idea_user"),
    )
