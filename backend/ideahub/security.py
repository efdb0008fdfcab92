"""
Idea Hub Backend — Authentication Helpers
==========================================

What:  Password hashing (bcrypt), bearer token issue/verify (PyJWT, HS256)
       and the FastAPI dependencies that resolve the caller of a request.

Caller resolution:
    get_optional_caller  → CallerIdentity or None (missing/invalid token)
    require_caller       → CallerIdentity or AuthenticationError (401)

Both read the token through HTTPBearer(auto_error=False) so a missing header
reaches our own error handler instead of FastAPI's default 403. Routes list
the caller dependency before the database session, so an unauthenticated
request is rejected before any persistence call.

bcrypt is CPU-bound; hashing and verification run in Starlette's threadpool.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from ideahub.config import settings
from ideahub.exceptions import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class CallerIdentity:
    """The resolved caller of a request, decoded from its bearer token."""

    user_id: str
    email: Optional[str] = None
    username: Optional[str] = None


# ── Passwords ─────────────────────────────────────────────────────────────
def _password_bytes(password: str) -> bytes:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes",
            field="password",
        )
    return encoded


async def hash_password(password: str) -> str:
    encoded = _password_bytes(password)
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    hashed = await run_in_threadpool(bcrypt.hashpw, encoded, salt)
    return hashed.decode("utf-8")


async def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """False for a missing hash, an over-long password or a mismatch."""
    if not password_hash:
        return False
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        return False
    try:
        return await run_in_threadpool(bcrypt.checkpw, encoded, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Malformed password hash encountered during verification")
        return False


# ── Tokens ────────────────────────────────────────────────────────────────
def create_access_token(user_id: str, email: str, username: str) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "username": username,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CallerIdentity:
    """
    Verifies signature and expiry.

    Raises:
        AuthenticationError: expired, tampered or malformed token.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid or expired token") from e

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid or expired token")
    return CallerIdentity(
        user_id=user_id,
        email=payload.get("email"),
        username=payload.get("username"),
    )


# ── Dependencies ──────────────────────────────────────────────────────────
async def get_optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[CallerIdentity]:
    """Resolves the caller when a valid token is present; never raises."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except AuthenticationError as e:
        logger.debug("Ignoring unusable bearer token: %s", e.message)
        return None


async def require_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> CallerIdentity:
    if credentials is None:
        raise AuthenticationError()
    return decode_access_token(credentials.credentials)
