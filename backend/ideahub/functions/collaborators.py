"""
Collaborator functions.

collaborators-list checks for ideaId before opening a query. The response
echoes MAX_COLLABORATORS as `maxAllowed`; the cap itself is enforced by
collaborators-add.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import ApiResult, EnvelopeStyle
from ideahub.exceptions import ValidationError
from ideahub.models.collaborator import MAX_COLLABORATORS
from ideahub.schemas.collaborator import CollaboratorAdd
from ideahub.security import CallerIdentity, require_caller
from ideahub.services.collaborator_service import collaborator_service

router = APIRouter(tags=["Functions"])

STYLE = EnvelopeStyle.FUNCTION


@router.get("/collaborators-list", summary="List collaborators of an idea")
async def collaborators_list(
    idea_id: Optional[str] = Query(default=None, alias="ideaId"),
    db: AsyncSession = Depends(get_db_session),
):
    if not idea_id:
        raise ValidationError("Idea ID is required", field="ideaId")
    rows = await collaborator_service.list_collaborators(db, idea_id)
    return ApiResult(
        data=rows,
        extra={"count": len(rows), "maxAllowed": MAX_COLLABORATORS},
    ).render(STYLE)


@router.post("/collaborators-add", status_code=201, summary="Add a collaborator")
async def collaborators_add(
    payload: CollaboratorAdd,
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    if not payload.idea_id or not payload.user_id:
        raise ValidationError.missing_fields(
            ["ideaId", "userId"], message="Idea ID and User ID are required"
        )
    row = await collaborator_service.add_collaborator(
        db, caller.user_id, payload.idea_id, payload.user_id, payload.role
    )
    count = await collaborator_service.count(db, payload.idea_id)
    return ApiResult(
        data=row,
        status_code=201,
        message="Collaborator added successfully",
        extra={"collaboratorCount": count, "maxAllowed": MAX_COLLABORATORS},
    ).render(STYLE)


@router.delete("/collaborators-remove", summary="Remove a collaborator")
async def collaborators_remove(
    idea_id: Optional[str] = Query(default=None, alias="ideaId"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    caller: CallerIdentity = Depends(require_caller),
    db: AsyncSession = Depends(get_db_session),
):
    if not idea_id or not user_id:
        raise ValidationError.missing_fields(
            ["ideaId", "userId"], message="Idea ID and User ID are required"
        )
    await collaborator_service.remove_collaborator(db, caller.user_id, idea_id, user_id)
    return ApiResult(message="Collaborator removed successfully").render(STYLE)
