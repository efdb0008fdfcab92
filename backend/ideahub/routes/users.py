"""
Idea Hub Backend — User Search Route
=====================================

GET /api/users?query= matches username or full name. Without a query it
answers 400 before opening a query.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.exceptions import ValidationError
from ideahub.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])

STYLE = EnvelopeStyle.ROUTE


@router.get("", summary="Search users")
async def search_users(
    query: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    if not query:
        raise ValidationError("Query parameter is required", field="query")
    users = await user_service.search_users(db, query)
    return ApiResult(data=users, message="Users retrieved successfully").render(STYLE)
