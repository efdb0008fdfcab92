"""
Idea Hub Backend — Workspace Routes
====================================

These endpoints answer with bare records (no success wrapper) and
`{"error": ...}` on failure; see ideahub.envelopes.

    GET    /api/workspace?userId=&includeArchived=
    POST   /api/workspace
    GET    /api/workspace/{id}
    PATCH  /api/workspace/{id}
    DELETE /api/workspace/{id}      → {"status": "deleted"}
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.database import get_db_session
from ideahub.envelopes import WORKSPACE_PREFIX, ApiResult, EnvelopeStyle
from ideahub.schemas.workspace import WorkspaceCreate, WorkspaceUpdate
from ideahub.services.workspace_service import workspace_service

router = APIRouter(prefix=WORKSPACE_PREFIX, tags=["Workspace"])

STYLE = EnvelopeStyle.BARE


@router.get("", summary="List workspaces")
async def list_workspaces(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    include_archived: bool = Query(default=False, alias="includeArchived"),
    db: AsyncSession = Depends(get_db_session),
):
    workspaces = await workspace_service.list_workspaces(db, user_id, include_archived)
    return ApiResult(data=workspaces).render(STYLE)


@router.post("", summary="Create a workspace")
async def create_workspace(payload: WorkspaceCreate, db: AsyncSession = Depends(get_db_session)):
    return ApiResult(data=await workspace_service.create_workspace(db, payload)).render(STYLE)


@router.get("/{workspace_id}", summary="Get a workspace")
async def get_workspace(workspace_id: str, db: AsyncSession = Depends(get_db_session)):
    return ApiResult(data=await workspace_service.get_workspace(db, workspace_id)).render(STYLE)


@router.patch("/{workspace_id}", summary="Update a workspace")
async def update_workspace(
    workspace_id: str,
    payload: WorkspaceUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    workspace = await workspace_service.update_workspace(db, workspace_id, payload)
    return ApiResult(data=workspace).render(STYLE)


@router.delete("/{workspace_id}", summary="Delete a workspace")
async def delete_workspace(workspace_id: str, db: AsyncSession = Depends(get_db_session)):
    await workspace_service.delete_workspace(db, workspace_id)
    return ApiResult(data={"status": "deleted"}).render(STYLE)
