"""
User functions: profile page, profile edit, follow / unfollow.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.exceptions import ValidationError
from ideahub.schemas.user import FollowRequest, FollowState, UserUpdate
from ideahub.security import CallerIdentity, get_optional_caller, require_caller
from ideahub.services.user_service import user_service

router = APIRouter(tags=["Functions"])

STYLE = EnvelopeStyle.FUNCTION


@router.get("/users-profile", summary="Get a user profile")
async def users_profile(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    username: Optional[str] = Query(default=None),
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db_session),
):
    if not user_id and not username:
        raise ValidationError("User ID or username is required")
    profile = await user_service.get_profile(
        db, user_id=user_id, username=username, caller_id=caller.user_id if caller else None
    )
    return ApiResult(data=profile).render(STYLE)


@router.put("/users-update", summary="Update the caller's profile")
async def users_update(
    payload: UserUpdate,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    profile = await user_service.update_profile(db, caller.user_id, payload)
    return ApiResult(data=profile, message="Profile updated successfully").render(STYLE)


@router.post("/users-follow", summary="Follow or unfollow a user")
async def users_follow(
    payload: FollowRequest,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    following = await user_service.follow(db, caller, payload.user_id, payload.action)
    message = "User followed successfully" if following else "User unfollowed successfully"
    return ApiResult(data=FollowState(is_following=following), message=message).render(STYLE)
