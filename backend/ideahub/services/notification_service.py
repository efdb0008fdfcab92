"""
Idea Hub Backend — Notification Service
========================================

What:  Lists, marks and deletes a user's notifications, and creates the
       notifications emitted by the star, fork, comment and collaborator flows.

Every read and write is scoped to the owning user: a notification id that
belongs to someone else is reported as not found.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import db_operation
from ideahub.exceptions import NotFoundError
from ideahub.models.enums import NotificationType
from ideahub.models.notification import Notification
from ideahub.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)


class NotificationService:

    @db_operation("Could not retrieve notifications. Please try again.")
    async def list_notifications(
        self, db: AsyncSession, user_id: str, only_unread: bool = False
    ) -> List[NotificationResponse]:
        query = select(Notification).where(Notification.user_id == user_id)
        if only_unread:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())

        result = await db.execute(query)
        return [NotificationResponse.from_model(row) for row in result.scalars().all()]

    @db_operation("Could not create the notification.")
    async def create_notification(
        self,
        db: AsyncSession,
        user_id: str,
        type: NotificationType,
        message: str,
        related_user_id: Optional[str] = None,
        related_idea_id: Optional[str] = None,
        related_url: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type.value,
            message=message,
            related_user_id=related_user_id,
            related_idea_id=related_idea_id,
            related_url=related_url,
        )
        db.add(notification)
        await db.flush()
        logger.info("Notification %s (%s) created for user %s", notification.id, type.value, user_id)
        return notification

    @db_operation("Could not update the notification.")
    async def mark_as_read(self, db: AsyncSession, user_id: str, notification_id: str) -> None:
        result = await db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="notification", resource_id=notification_id)

    @db_operation("Could not update notifications.")
    async def mark_all_as_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        logger.info("Marked %d notifications read for user %s", result.rowcount, user_id)
        return result.rowcount

    @db_operation("Could not delete the notification.")
    async def delete_notification(self, db: AsyncSession, user_id: str, notification_id: str) -> None:
        result = await db.execute(
            delete(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="notification", resource_id=notification_id)


notification_service = NotificationService()
