"""
Idea Hub Backend — Notification Routes
=======================================

All three operate on the caller's own notifications; without a caller they
answer 401 before opening a query.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.exceptions import ValidationError
from ideahub.schemas.notification import NotificationUpdate
from ideahub.security import CallerIdentity, require_caller
from ideahub.services.notification_service import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

STYLE = EnvelopeStyle.ROUTE


@router.get("", summary="List the caller's notifications")
async def list_notifications(
    only_unread: bool = Query(default=False, alias="onlyUnread"),
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    notifications = await notification_service.list_notifications(db, caller.user_id, only_unread)
    return ApiResult(data=notifications).render(STYLE)


@router.put("", summary="Mark notifications as read")
async def mark_notifications(
    payload: NotificationUpdate,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    if payload.notification_id:
        await notification_service.mark_as_read(db, caller.user_id, payload.notification_id)
        return ApiResult(message="Notification marked as read").render(STYLE)
    if payload.mark_all_as_read:
        count = await notification_service.mark_all_as_read(db, caller.user_id)
        return ApiResult(data={"updated": count}, message="All notifications marked as read").render(STYLE)
    raise ValidationError("notificationId or markAllAsRead required")


@router.delete("/{notification_id}", summary="Delete a notification")
async def delete_notification(
    notification_id: str,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    await notification_service.delete_notification(db, caller.user_id, notification_id)
    return ApiResult(message="Notification deleted").render(STYLE)
