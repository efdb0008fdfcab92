"""
Idea Hub Backend — Workspace Service
=====================================

What:  CRUD over workspaces: fetch with idea/author/collaborators expanded,
       list by owner (newest first), create with empty document and canvas,
       partial update, hard delete. Also the idea-keyed views: the workspace
       of an idea and the caller's permissions on it.

An idea's workspace is the oldest one attached to it (the one created with
the idea).

Partial update writes exactly the keys present in the request body, so
archiving a workspace never touches its document or whiteboard. Concurrent
updates are last-write-wins.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ideahub.database import db_operation
from ideahub.exceptions import NotFoundError, ValidationError
from ideahub.models.idea import Idea
from ideahub.models.workspace import Workspace, empty_document, empty_whiteboard
from ideahub.schemas.user import AuthorSummary
from ideahub.schemas.workspace import (
    IdeaAccessView,
    PermissionFlags,
    WorkspaceCreate,
    WorkspacePermissionsResponse,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from ideahub.security import CallerIdentity
from ideahub.services.access import ensure_can_view, ensure_can_view_workspace, resolve_permissions
from ideahub.services.collaborator_service import collaborator_service

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "Untitled"
UPDATABLE_FIELDS = ("document", "whiteboard", "name", "archived", "thumbnail")


def new_workspace(
    idea_id: str,
    user_id: str,
    name: Optional[str] = None,
    is_public: bool = False,
    document: Optional[dict] = None,
    whiteboard: Optional[dict] = None,
) -> Workspace:
    """Builds an unsaved workspace with empty editor state unless given."""
    return Workspace(
        idea_id=idea_id,
        user_id=user_id,
        name=name or DEFAULT_WORKSPACE_NAME,
        is_public=is_public,
        document=document if document is not None else empty_document(),
        whiteboard=whiteboard if whiteboard is not None else empty_whiteboard(),
    )


class WorkspaceService:

    async def _load(self, db: AsyncSession, workspace_id: str) -> Workspace:
        result = await db.execute(
            select(Workspace)
            .where(Workspace.id == workspace_id)
            .options(selectinload(Workspace.idea), selectinload(Workspace.owner))
            .execution_options(populate_existing=True)
        )
        workspace = result.scalar_one_or_none()
        if workspace is None:
            raise NotFoundError(resource="workspace", resource_id=workspace_id)
        return workspace

    async def find_for_idea(self, db: AsyncSession, idea_id: str) -> Optional[Workspace]:
        result = await db.execute(
            select(Workspace)
            .where(Workspace.idea_id == idea_id)
            .options(selectinload(Workspace.idea), selectinload(Workspace.owner))
            .order_by(Workspace.created_at.asc(), Workspace.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @db_operation("Could not retrieve the workspace.")
    async def get_workspace(self, db: AsyncSession, workspace_id: str) -> WorkspaceResponse:
        workspace = await self._load(db, workspace_id)
        collaborators = await collaborator_service.list_collaborators(db, workspace.idea_id)
        return WorkspaceResponse.from_model(workspace, expand=True, collaborators=collaborators)

    @db_operation("Could not retrieve workspaces.")
    async def list_workspaces(
        self,
        db: AsyncSession,
        user_id: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[WorkspaceResponse]:
        query = select(Workspace).options(
            selectinload(Workspace.idea), selectinload(Workspace.owner)
        )
        if user_id:
            query = query.where(Workspace.user_id == user_id)
        if not include_archived:
            query = query.where(Workspace.archived.is_(False))
        query = query.order_by(Workspace.created_at.desc(), Workspace.id.desc())

        result = await db.execute(query)
        return [WorkspaceResponse.from_model(ws, expand=True) for ws in result.scalars().all()]

    @db_operation("Could not create the workspace.")
    async def create_workspace(self, db: AsyncSession, payload: WorkspaceCreate) -> WorkspaceResponse:
        if not payload.idea_id or not payload.user_id:
            raise ValidationError.missing_fields(
                ["ideaId", "userId"], message="ideaId and userId are required"
            )

        workspace = new_workspace(
            idea_id=payload.idea_id,
            user_id=payload.user_id,
            name=payload.name,
            is_public=bool(payload.is_public),
        )
        db.add(workspace)
        await db.flush()
        logger.info("Workspace %s created for idea %s", workspace.id, workspace.idea_id)
        return WorkspaceResponse.from_model(workspace)

    @db_operation("Could not update the workspace.")
    async def update_workspace(
        self, db: AsyncSession, workspace_id: str, payload: WorkspaceUpdate
    ) -> WorkspaceResponse:
        workspace = await self._load(db, workspace_id)

        changes = payload.model_dump(exclude_unset=True)
        for name in UPDATABLE_FIELDS:
            if name in changes:
                setattr(workspace, name, changes[name])
        await db.flush()
        logger.info("Workspace %s updated (%s)", workspace_id, ", ".join(sorted(changes)) or "no fields")
        return WorkspaceResponse.from_model(workspace)

    @db_operation("Could not delete the workspace.")
    async def delete_workspace(self, db: AsyncSession, workspace_id: str) -> None:
        workspace = await db.get(Workspace, workspace_id)
        if workspace is None:
            raise NotFoundError(resource="workspace", resource_id=workspace_id)
        await db.delete(workspace)
        await db.flush()
        logger.info("Workspace %s deleted", workspace_id)


    @db_operation("Could not retrieve the workspace.")
    async def get_workspace_for_idea(
        self, db: AsyncSession, idea_id: str, caller: Optional[CallerIdentity]
    ) -> WorkspaceResponse:
        """
        Raises:
            NotFoundError: the idea has no workspace.
            AuthenticationError / PermissionDeniedError: private workspace
                and the caller is neither its owner nor an idea collaborator.
        """
        workspace = await self.find_for_idea(db, idea_id)
        if workspace is None:
            raise NotFoundError(resource="workspace", resource_id=idea_id)
        await ensure_can_view_workspace(db, workspace, caller)
        collaborators = await collaborator_service.list_collaborators(db, idea_id)
        return WorkspaceResponse.from_model(workspace, expand=True, collaborators=collaborators)

    @db_operation("Could not retrieve permissions.")
    async def get_permissions(
        self, db: AsyncSession, idea_id: str, caller: Optional[CallerIdentity]
    ) -> WorkspacePermissionsResponse:
        result = await db.execute(
            select(Idea).where(Idea.id == idea_id).options(selectinload(Idea.author))
        )
        idea = result.scalar_one_or_none()
        if idea is None:
            raise NotFoundError(resource="idea", resource_id=idea_id)
        permissions = await resolve_permissions(db, idea, caller)
        ensure_can_view(permissions, caller)

        workspace = await self.find_for_idea(db, idea_id)
        collaborators = await collaborator_service.list_collaborators(db, idea_id)
        return WorkspacePermissionsResponse(
            idea=IdeaAccessView(
                id=idea.id,
                title=idea.title,
                description=idea.description,
                visibility=idea.visibility,
                status=idea.status,
                author=AuthorSummary.from_model(idea.author) if idea.author else None,
                collaborators=collaborators,
            ),
            workspace=WorkspaceResponse.from_model(workspace) if workspace else None,
            permissions=PermissionFlags.from_permissions(permissions),
        )

workspace_service = WorkspaceService()
