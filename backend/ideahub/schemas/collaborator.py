"""Collaborator schemas."""

from datetime import datetime
from typing import Optional

from ideahub.models.collaborator import Collaborator
from ideahub.schemas.common import CamelModel
from ideahub.schemas.user import UserSummary


class CollaboratorResponse(CamelModel):
    id: str
    idea_id: str
    user_id: str
    role: str
    created_at: datetime
    user: Optional[UserSummary] = None

    @classmethod
    def from_model(cls, row: Collaborator) -> "CollaboratorResponse":
        """Expects `user` to be eager-loaded."""
        return cls(
            id=row.id,
            idea_id=row.idea_id,
            user_id=row.user_id,
            role=row.role,
            created_at=row.created_at,
            user=UserSummary.from_model(row.user) if row.user is not None else None,
        )


class CollaboratorAdd(CamelModel):
    idea_id: Optional[str] = None
    user_id: Optional[str] = None
    role: Optional[str] = None
