"""ideas-list: public, paginated idea listing."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.schemas.idea import IdeaFilters, parse_tags
from ideahub.services.idea_service import idea_service

router = APIRouter(tags=["Functions"])


@router.get("/ideas-list", summary="List public ideas")
async def ideas_list(
    category: Optional[str] = None,
    language: Optional[str] = None,
    query: Optional[str] = None,
    sort: Optional[str] = None,
    tags: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
    db: AsyncSession = Depends(get_db_session),
):
    filters = IdeaFilters(
        category=category,
        language=language,
        search=query,
        tags=parse_tags(tags),
        sort=sort,
    )
    ideas, pagination = await idea_service.list_public_ideas(db, filters, page, limit)
    return ApiResult(data=ideas, extra={"pagination": pagination}).render(EnvelopeStyle.FUNCTION)
