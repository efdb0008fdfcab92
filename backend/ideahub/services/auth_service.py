"""
Idea Hub Backend — Auth Service
================================

What:  Account registration, credential login and current-user lookup.

Flow:
    register  → presence check → uniqueness (email OR username) → bcrypt hash
                → insert user (hash persisted) → profile + token
    login     → lookup by email → bcrypt verify → profile + token
                (unknown email, no stored hash and wrong password all answer
                with the same 401 message)
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import db_operation
from ideahub.exceptions import AuthenticationError, NotFoundError, ValidationError
from ideahub.models.user import User
from ideahub.schemas.user import AuthResult, SigninRequest, SignupRequest, UserProfile
from ideahub.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _issue(user: User) -> AuthResult:
    return AuthResult(
        user=UserProfile.from_model(user),
        token=create_access_token(user.id, user.email, user.username),
    )


class AuthService:

    @db_operation("Could not create the account. Please try again.")
    async def register(self, db: AsyncSession, payload: SignupRequest) -> AuthResult:
        missing = [
            name
            for name, value in (
                ("email", payload.email),
                ("password", payload.password),
                ("username", payload.username),
            )
            if not value
        ]
        if missing:
            raise ValidationError.missing_fields(missing)

        email = payload.email.strip().lower()
        username = payload.username.strip()

        result = await db.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
        existing = result.scalars().first()
        if existing is not None:
            if existing.email == email:
                raise ValidationError("Email already in use", field="email")
            raise ValidationError("Username already taken", field="username")

        user = User(
            email=email,
            username=username,
            full_name=payload.full_name or username,
            password_hash=await hash_password(payload.password),
        )
        db.add(user)
        await db.flush()
        logger.info("Registered user %s (%s)", user.id, user.username)
        return _issue(user)

    @db_operation("Could not sign in. Please try again.")
    async def login(self, db: AsyncSession, payload: SigninRequest) -> AuthResult:
        if not payload.email or not payload.password:
            raise ValidationError("Email and password are required")

        result = await db.execute(select(User).where(User.email == payload.email.strip().lower()))
        user = result.scalar_one_or_none()

        if user is None or not await verify_password(payload.password, user.password_hash):
            logger.info("Failed sign-in attempt for %s", payload.email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        return _issue(user)

    @db_operation("Could not retrieve the user.")
    async def get_current_user(self, db: AsyncSession, user_id: str) -> UserProfile:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserProfile.from_model(user)


auth_service = AuthService()
