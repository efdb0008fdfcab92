"""
Idea Hub Backend — Collaborator Service
========================================

What:  Lists, adds and removes the users granted access to an idea.

Write-time rules for add, checked in this order:
    1. caller owns the idea                      → 403
    2. target is not the caller                  → 400
    3. target user exists                        → 404
    4. target is not already a collaborator      → 400
    5. a slot below MAX_COLLABORATORS is free    → 400 (currentCount, maxAllowed)

The slot is taken with a conditional UPDATE on `ideas.collaborator_count`,
so two adds racing for the last slot cannot both pass: the database
serializes the writes and the loser sees the counter already at the cap.
"""

import logging
from typing import List

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ideahub.database import db_operation
from ideahub.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ideahub.models.collaborator import MAX_COLLABORATORS, Collaborator
from ideahub.models.enums import CollaboratorRole, NotificationType
from ideahub.models.idea import Idea
from ideahub.models.user import User
from ideahub.schemas.collaborator import CollaboratorResponse
from ideahub.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def _resolve_role(role) -> CollaboratorRole:
    if not role:
        return CollaboratorRole.VIEWER
    try:
        return CollaboratorRole(role.upper())
    except ValueError:
        raise ValidationError(f"Invalid role '{role}'", field="role")


class CollaboratorService:

    async def _owned_idea(self, db: AsyncSession, idea_id: str, caller_id: str) -> Idea:
        idea = await db.get(Idea, idea_id)
        if idea is None:
            raise NotFoundError(resource="idea", resource_id=idea_id)
        if idea.author_id != caller_id:
            raise PermissionDeniedError("Only the idea owner can manage collaborators")
        return idea

    async def _reserve_slot(self, db: AsyncSession, idea_id: str) -> None:
        result = await db.execute(
            update(Idea)
            .where(Idea.id == idea_id, Idea.collaborator_count < MAX_COLLABORATORS)
            .values(
                collaborator_count=Idea.collaborator_count + 1,
                updated_at=Idea.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await self.count(db, idea_id)
            raise ValidationError(
                f"Maximum of {MAX_COLLABORATORS} collaborators reached",
                context={"currentCount": current, "maxAllowed": MAX_COLLABORATORS},
            )

    async def count(self, db: AsyncSession, idea_id: str) -> int:
        result = await db.execute(
            select(func.count(Collaborator.id)).where(Collaborator.idea_id == idea_id)
        )
        return result.scalar() or 0

    @db_operation("Could not retrieve collaborators.")
    async def list_collaborators(self, db: AsyncSession, idea_id: str) -> List[CollaboratorResponse]:
        result = await db.execute(
            select(Collaborator)
            .where(Collaborator.idea_id == idea_id)
            .options(selectinload(Collaborator.user))
            .order_by(Collaborator.created_at.asc(), Collaborator.id.asc())
        )
        return [CollaboratorResponse.from_model(row) for row in result.scalars().all()]

    @db_operation("Could not add the collaborator.")
    async def add_collaborator(
        self,
        db: AsyncSession,
        caller_id: str,
        idea_id: str,
        user_id: str,
        role=None,
    ) -> CollaboratorResponse:
        idea = await self._owned_idea(db, idea_id, caller_id)
        if user_id == caller_id:
            raise ValidationError("You cannot add yourself as a collaborator", field="userId")
        resolved_role = _resolve_role(role)

        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        existing = await db.execute(
            select(Collaborator.id).where(
                Collaborator.idea_id == idea_id, Collaborator.user_id == user_id
            )
        )
        if existing.first() is not None:
            raise ValidationError("User is already a collaborator", field="userId")

        await self._reserve_slot(db, idea_id)

        row = Collaborator(idea_id=idea_id, user_id=user_id, role=resolved_role.value)
        db.add(row)
        await db.flush()

        await notification_service.create_notification(
            db,
            user_id=user_id,
            type=NotificationType.MENTION,
            message=f'You were added as a collaborator on "{idea.title}"',
            related_user_id=caller_id,
            related_idea_id=idea_id,
            related_url=f"/ideas/{idea_id}",
        )

        result = await db.execute(
            select(Collaborator)
            .where(Collaborator.id == row.id)
            .options(selectinload(Collaborator.user))
            .execution_options(populate_existing=True)
        )
        logger.info("User %s added to idea %s as %s", user_id, idea_id, resolved_role.value)
        return CollaboratorResponse.from_model(result.scalar_one())

    @db_operation("Could not remove the collaborator.")
    async def remove_collaborator(self, db: AsyncSession, caller_id: str, idea_id: str, user_id: str) -> None:
        await self._owned_idea(db, idea_id, caller_id)
        result = await db.execute(
            delete(Collaborator).where(
                Collaborator.idea_id == idea_id, Collaborator.user_id == user_id
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="collaborator", resource_id=user_id)
        await db.execute(
            update(Idea)
            .where(Idea.id == idea_id, Idea.collaborator_count > 0)
            .values(
                collaborator_count=Idea.collaborator_count - 1,
                updated_at=Idea.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        logger.info("User %s removed from idea %s", user_id, idea_id)


collaborator_service = CollaboratorService()
