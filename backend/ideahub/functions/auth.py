"""
Auth functions.

Tokens are stateless JWTs, so signing out only tells the client to drop its
token; nothing is revoked server-side.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.schemas.user import SigninRequest, SignupRequest
from ideahub.security import CallerIdentity, require_caller
from ideahub.services.auth_service import auth_service

router = APIRouter(tags=["Functions"])

STYLE = EnvelopeStyle.FUNCTION


@router.post("/auth-signup", status_code=201, summary="Register")
async def auth_signup(payload: SignupRequest, db: AsyncSession = Depends(get_db_session)):
    result = await auth_service.register(db, payload)
    return ApiResult(status_code=201, extra={"user": result.user, "token": result.token}).render(STYLE)


@router.post("/auth-signin", summary="Sign in")
async def auth_signin(payload: SigninRequest, db: AsyncSession = Depends(get_db_session)):
    result = await auth_service.login(db, payload)
    return ApiResult(
        extra={
            "user": result.user,
            "token": result.token,
            "session": {"access_token": result.token},
        }
    ).render(STYLE)


@router.get("/auth-user", summary="Current user")
async def auth_user(
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    user = await auth_service.get_current_user(db, caller.user_id)
    return ApiResult(extra={"user": user}).render(STYLE)


@router.post("/auth-signout", summary="Sign out")
async def auth_signout():
    return ApiResult(message="Signed out successfully").render(STYLE)
