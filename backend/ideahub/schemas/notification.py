"""Notification schemas."""

from datetime import datetime
from typing import Optional

from ideahub.models.notification import Notification
from ideahub.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    id: str
    user_id: str
    type: str
    message: str
    is_read: bool
    related_user_id: Optional[str] = None
    related_idea_id: Optional[str] = None
    related_url: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_model(cls, row: Notification) -> "NotificationResponse":
        return cls(
            id=row.id,
            user_id=row.user_id,
            type=row.type,
            message=row.message,
            is_read=row.is_read,
            related_user_id=row.related_user_id,
            related_idea_id=row.related_idea_id,
            related_url=row.related_url,
            created_at=row.created_at,
        )


class NotificationUpdate(CamelModel):
    """Either one notification id or markAllAsRead=true."""

    notification_id: Optional[str] = None
    mark_all_as_read: Optional[bool] = None
