"""
Idea Hub Backend — User & Auth Schemas
=======================================

Three projections of a User, from widest to narrowest:

    UserProfile    full public profile (auth responses, user search)
    UserDetail     profile page: UserProfile with counts taken from rows
    UserSummary    collaborator listing (id, username, fullName, avatarUrl, email, bio)
    AuthorSummary  embedded author of ideas, comments and workspaces

None of them has a slot for the password hash.
"""

from datetime import datetime
from typing import Optional

from ideahub.models.user import User
from ideahub.schemas.common import CamelModel


class UserProfile(CamelModel):
    id: str
    email: str
    username: str
    full_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    is_verified: bool = False
    joined_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            full_name=user.full_name,
            avatar=user.avatar_url,
            bio=user.bio,
            location=user.location,
            website=user.website,
            followers=user.followers,
            following=user.following,
            public_repos=user.public_repos,
            is_verified=user.is_verified,
            joined_at=user.joined_at,
        )


class UserDetail(UserProfile):
    stars: int = 0
    is_following: bool = False

    @classmethod
    def from_counts(
        cls,
        user: User,
        public_repos: int,
        followers: int,
        following: int,
        stars: int,
        is_following: bool = False,
    ) -> "UserDetail":
        fields = UserProfile.from_model(user).model_dump()
        fields.update(
            public_repos=public_repos,
            followers=followers,
            following=following,
            stars=stars,
            is_following=is_following,
        )
        return cls(**fields)


class UserSummary(CamelModel):
    id: str
    username: str
    full_name: str
    avatar_url: Optional[str] = None
    email: str
    bio: Optional[str] = None

    @classmethod
    def from_model(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            email=user.email,
            bio=user.bio,
        )


class AuthorSummary(CamelModel):
    id: str
    username: str
    full_name: str
    avatar: Optional[str] = None

    @classmethod
    def from_model(cls, user: User) -> "AuthorSummary":
        return cls(id=user.id, username=user.username, full_name=user.full_name, avatar=user.avatar_url)


# ── Requests ──────────────────────────────────────────────────────────────
# Presence is checked by the auth service so a missing field is reported
# with the same 400 message on every entry point.


class SignupRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None


class SigninRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResult(CamelModel):
    """Profile plus a freshly issued bearer token."""

    user: UserProfile
    token: str


class UserUpdate(CamelModel):
    """Only the keys present in the body are written."""

    full_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None


class FollowRequest(CamelModel):
    user_id: Optional[str] = None
    action: Optional[str] = None


class FollowState(CamelModel):
    is_following: bool
