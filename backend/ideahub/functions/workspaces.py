"""
Idea-keyed workspace functions.

All three take ?ideaId= and an optional caller. A private idea or workspace
answers 401 to an anonymous caller and 403 to anyone else without access.

    workspace-permissions   idea, its workspace and the caller's rights
    workspaces-by-idea      the idea's workspace, expanded
    ideas-workspace         the full idea plus its workspace
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.exceptions import ValidationError
from ideahub.security import CallerIdentity, get_optional_caller
from ideahub.services.idea_service import idea_service
from ideahub.services.workspace_service import workspace_service

router = APIRouter(tags=["Functions"])

STYLE = EnvelopeStyle.FUNCTION


def _require_idea_id(idea_id: Optional[str]) -> str:
    if not idea_id:
        raise ValidationError.missing_fields(["ideaId"])
    return idea_id


@router.get("/workspace-permissions", summary="Caller's rights on an idea's workspace")
async def workspace_permissions(
    idea_id: Optional[str] = Query(default=None, alias="ideaId"),
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db_session),
):
    result = await workspace_service.get_permissions(db, _require_idea_id(idea_id), caller)
    return ApiResult(data=result, message="Permissions retrieved successfully").render(STYLE)


@router.get("/workspaces-by-idea", summary="Workspace of an idea")
async def workspaces_by_idea(
    idea_id: Optional[str] = Query(default=None, alias="ideaId"),
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db_session),
):
    workspace = await workspace_service.get_workspace_for_idea(db, _require_idea_id(idea_id), caller)
    return ApiResult(data=workspace).render(STYLE)


@router.get("/ideas-workspace", summary="Idea together with its workspace")
async def ideas_workspace(
    idea_id: Optional[str] = Query(default=None, alias="ideaId"),
    caller: Optional[CallerIdentity] = Depends(get_optional_caller),
    db: AsyncSession = Depends(get_db_session),
):
    result = await idea_service.get_idea_workspace(db, _require_idea_id(idea_id), caller)
    return ApiResult(data=result).render(STYLE)
