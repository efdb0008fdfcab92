"""
Idea Hub Backend — Comment Routes
==================================

    GET    /api/comments?ideaId=       threaded comments, newest first
    POST   /api/comments               create comment or reply
    PATCH  /api/comments/{id}          edit (author)
    DELETE /api/comments/{id}          delete with replies (author)
    POST   /api/comments/{id}/vote     votes += delta
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.exceptions import ValidationError
from ideahub.schemas.comment import CommentCreate, CommentUpdate, VoteRequest
from ideahub.security import CallerIdentity, require_caller
from ideahub.services.comment_service import comment_service

router = APIRouter(prefix="/api/comments", tags=["Comments"])

STYLE = EnvelopeStyle.ROUTE


@router.get("", summary="List comments for an idea")
async def list_comments(
    idea_id: Optional[str] = Query(default=None, alias="ideaId"),
    db: AsyncSession = Depends(get_db_session),
):
    if not idea_id:
        raise ValidationError("ideaId parameter is required", field="ideaId")
    return ApiResult(data=await comment_service.list_comments(db, idea_id)).render(STYLE)


@router.post("", status_code=201, summary="Post a comment")
async def create_comment(
    payload: CommentCreate,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    comment = await comment_service.create_comment(db, caller, payload)
    return ApiResult(data=comment, status_code=201).render(STYLE)


@router.patch("/{comment_id}", summary="Edit a comment")
async def update_comment(
    comment_id: str,
    payload: CommentUpdate,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    return ApiResult(data=await comment_service.update_comment(db, comment_id, caller, payload)).render(STYLE)


@router.delete("/{comment_id}", summary="Delete a comment")
async def delete_comment(
    comment_id: str,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    await comment_service.delete_comment(db, comment_id, caller)
    return ApiResult(message="Comment deleted successfully").render(STYLE)


@router.post("/{comment_id}/vote", summary="Vote on a comment")
async def vote_comment(
    comment_id: str,
    payload: VoteRequest,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    return ApiResult(data=await comment_service.vote(db, comment_id, payload.delta)).render(STYLE)
