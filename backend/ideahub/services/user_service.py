"""
Idea Hub Backend — User Service
================================

What:  User search, profile pages, profile edits and the follow graph.

Search matches username or full name, case-insensitively, at most
SEARCH_LIMIT users. `%` and `_` in the query match literally.

The profile page counts rows (ideas authored, follows, stars given) at read
time. follow / unfollow also move the `followers` / `following` counters on
both users in the same transaction, so the denormalized columns read by the
auth responses stay in step.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import db_operation
from ideahub.exceptions import NotFoundError, ValidationError
from ideahub.models.enums import NotificationType
from ideahub.models.follow import Follow
from ideahub.models.idea import Idea, Star
from ideahub.models.user import User
from ideahub.schemas.user import UserDetail, UserProfile, UserUpdate
from ideahub.security import CallerIdentity
from ideahub.services.notification_service import notification_service

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20
PROFILE_FIELDS = ("full_name", "bio", "location", "website", "avatar_url")
FOLLOW = "follow"
UNFOLLOW = "unfollow"


class UserService:

    async def _count(self, db: AsyncSession, column, value: str) -> int:
        result = await db.execute(select(func.count()).where(column == value))
        return result.scalar() or 0

    async def _is_following(self, db: AsyncSession, follower_id: str, following_id: str) -> bool:
        result = await db.execute(
            select(Follow.id).where(
                Follow.follower_id == follower_id, Follow.following_id == following_id
            )
        )
        return result.first() is not None

    async def _move_counters(self, db: AsyncSession, follower_id: str, following_id: str, delta: int) -> None:
        await db.execute(
            update(User)
            .where(User.id == follower_id)
            .values(following=User.following + delta, updated_at=User.updated_at)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            update(User)
            .where(User.id == following_id)
            .values(followers=User.followers + delta, updated_at=User.updated_at)
            .execution_options(synchronize_session=False)
        )

    @db_operation("Could not search users.")
    async def search_users(self, db: AsyncSession, query: Optional[str]) -> List[UserProfile]:
        if not query:
            raise ValidationError("Query parameter is required", field="query")
        result = await db.execute(
            select(User)
            .where(
                or_(
                    User.username.icontains(query, autoescape=True),
                    User.full_name.icontains(query, autoescape=True),
                )
            )
            .order_by(User.username.asc())
            .limit(SEARCH_LIMIT)
        )
        return [UserProfile.from_model(user) for user in result.scalars().all()]

    @db_operation("Could not retrieve the user.")
    async def get_profile(
        self,
        db: AsyncSession,
        user_id: Optional[str] = None,
        username: Optional[str] = None,
        caller_id: Optional[str] = None,
    ) -> UserDetail:
        """
        Looks the user up by id, or by username when no id is given.

        Raises:
            ValidationError: neither id nor username.
            NotFoundError: no such user.
        """
        if not user_id and not username:
            raise ValidationError("User ID or username is required")
        condition = User.id == user_id if user_id else User.username == username
        user = (await db.execute(select(User).where(condition))).scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id or username)

        is_following = False
        if caller_id and caller_id != user.id:
            is_following = await self._is_following(db, caller_id, user.id)
        return UserDetail.from_counts(
            user,
            public_repos=await self._count(db, Idea.author_id, user.id),
            followers=await self._count(db, Follow.following_id, user.id),
            following=await self._count(db, Follow.follower_id, user.id),
            stars=await self._count(db, Star.user_id, user.id),
            is_following=is_following,
        )

    @db_operation("Could not update the profile.")
    async def update_profile(self, db: AsyncSession, caller_id: str, payload: UserUpdate) -> UserProfile:
        user = await db.get(User, caller_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=caller_id)

        changes = payload.model_dump(exclude_unset=True)
        if "full_name" in changes and changes["full_name"] is None:
            raise ValidationError("Full name cannot be empty", field="fullName")
        for name in PROFILE_FIELDS:
            if name in changes:
                setattr(user, name, changes[name])
        await db.flush()
        logger.info("Profile %s updated (%s)", caller_id, ", ".join(sorted(changes)) or "no fields")
        return UserProfile.from_model(user)

    @db_operation("Could not update the follow.")
    async def follow(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        user_id: Optional[str],
        action: Optional[str],
    ) -> bool:
        """
        Follows or unfollows `user_id`; returns whether the caller now follows.

        Raises:
            ValidationError: missing fields, unknown action, self-follow,
                already following, or not following.
            NotFoundError: the target user does not exist.
        """
        if not user_id or not action:
            raise ValidationError.missing_fields(
                [name for name, value in (("userId", user_id), ("action", action)) if not value]
            )
        if action not in (FOLLOW, UNFOLLOW):
            raise ValidationError('Action must be "follow" or "unfollow"', field="action")
        if user_id == caller.user_id:
            raise ValidationError("Cannot follow yourself", field="userId")
        if await db.get(User, user_id) is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        if action == FOLLOW:
            if await self._is_following(db, caller.user_id, user_id):
                raise ValidationError("Already following this user")
            db.add(Follow(follower_id=caller.user_id, following_id=user_id))
            await db.flush()
            await self._move_counters(db, caller.user_id, user_id, 1)
            await notification_service.create_notification(
                db,
                user_id=user_id,
                type=NotificationType.FOLLOW,
                message=f"{caller.username or 'Someone'} started following you",
                related_user_id=caller.user_id,
                related_url=f"/users/{caller.user_id}",
            )
            logger.info("User %s followed %s", caller.user_id, user_id)
            return True

        result = await db.execute(
            delete(Follow).where(
                Follow.follower_id == caller.user_id, Follow.following_id == user_id
            )
        )
        if result.rowcount == 0:
            raise ValidationError("Not following this user")
        await self._move_counters(db, caller.user_id, user_id, -1)
        logger.info("User %s unfollowed %s", caller.user_id, user_id)
        return False


user_service = UserService()
