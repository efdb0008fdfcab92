"""
Idea Hub Backend — Idea Routes
===============================

    GET    /api/ideas              filtered listing (optional caller)
    POST   /api/ideas              create idea + workspace (caller required)
    GET    /api/ideas/{id}         single idea
    PATCH  /api/ideas/{id}         partial update (author)
    DELETE /api/ideas/{id}         delete (author)
    POST   /api/ideas/{id}/star    star
    DELETE /api/ideas/{id}/star    unstar
    POST   /api/ideas/{id}/fork    fork a public idea

The caller dependency is declared before the session so a request without
a caller is rejected before the database is touched.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.schemas.idea import IdeaCreate, IdeaFilters, IdeaForkRequest, IdeaUpdate, parse_tags
from ideahub.security import CallerIdentity, get_optional_caller, require_caller
from ideahub.services.idea_service import idea_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ideas", tags=["Ideas"])

STYLE = EnvelopeStyle.ROUTE


@router.get("", summary="List ideas")
async def list_ideas(
    category: Optional[str] = None,
    language: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    tags: Optional[str] = None,
    visibility: Optional[str] = None,
    status: Optional[str] = None,
    author_id: Optional[str] = Query(default=None, alias="authorId"),
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db_session),
):
    filters = IdeaFilters(
        category=category,
        language=language,
        search=search,
        tags=parse_tags(tags),
        author_id=author_id,
        visibility=visibility,
        status=status,
        sort=sort_by,
    )
    ideas = await idea_service.list_ideas(db, filters, caller)
    return ApiResult(data=ideas).render(STYLE)


@router.post("", status_code=201, summary="Create an idea")
async def create_idea(
    payload: IdeaCreate,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    idea = await idea_service.create_idea(db, caller.user_id, payload)
    return ApiResult(data=idea, status_code=201, message="Idea created successfully").render(STYLE)


@router.get("/{idea_id}", summary="Get one idea")
async def get_idea(
    idea_id: str,
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db_session),
):
    return ApiResult(data=await idea_service.get_idea(db, idea_id, caller)).render(STYLE)


@router.patch("/{idea_id}", summary="Update an idea")
async def update_idea(
    idea_id: str,
    payload: IdeaUpdate,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    idea = await idea_service.update_idea(db, idea_id, caller, payload)
    return ApiResult(data=idea, message="Idea updated successfully").render(STYLE)


@router.delete("/{idea_id}", summary="Delete an idea")
async def delete_idea(
    idea_id: str,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    await idea_service.delete_idea(db, idea_id, caller)
    return ApiResult(message="Idea deleted successfully").render(STYLE)


@router.post("/{idea_id}/star", summary="Star an idea")
async def star_idea(
    idea_id: str,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    return ApiResult(data=await idea_service.star_idea(db, idea_id, caller)).render(STYLE)


@router.delete("/{idea_id}/star", summary="Unstar an idea")
async def unstar_idea(
    idea_id: str,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    return ApiResult(data=await idea_service.unstar_idea(db, idea_id, caller)).render(STYLE)


@router.post("/{idea_id}/fork", status_code=201, summary="Fork an idea")
async def fork_idea(
    idea_id: str,
    payload: Optional[IdeaForkRequest] = None,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    fork = await idea_service.fork_idea(db, idea_id, caller, payload or IdeaForkRequest())
    return ApiResult(data=fork, status_code=201, message="Idea forked successfully").render(STYLE)
