"""
Idea Hub Backend — Workspace Schemas
=====================================

`document` and `whiteboard` are opaque JSON and pass through untouched.
WorkspaceUpdate relies on `model_dump(exclude_unset=True)`: a key that is
absent from the PATCH body is never written.

The access views at the bottom back the workspace-permissions and
ideas-workspace functions.
"""

from datetime import datetime
from typing import Any, List, Optional

from ideahub.models.idea import Idea
from ideahub.models.workspace import Workspace
from ideahub.schemas.collaborator import CollaboratorResponse
from ideahub.schemas.common import CamelModel
from ideahub.schemas.idea import IdeaResponse
from ideahub.schemas.user import AuthorSummary


class WorkspaceIdea(CamelModel):
    id: str
    title: str
    description: str
    category: str
    visibility: str
    status: str

    @classmethod
    def from_model(cls, idea: Idea) -> "WorkspaceIdea":
        return cls(
            id=idea.id,
            title=idea.title,
            description=idea.description,
            category=idea.category,
            visibility=idea.visibility,
            status=idea.status,
        )


class WorkspaceResponse(CamelModel):
    id: str
    name: str
    idea_id: str
    user_id: str
    document: Optional[Any] = None
    whiteboard: Optional[Any] = None
    thumbnail: Optional[str] = None
    is_public: bool
    archived: bool
    created_at: datetime
    updated_at: datetime
    idea: Optional[WorkspaceIdea] = None
    author: Optional[AuthorSummary] = None
    collaborators: Optional[List[CollaboratorResponse]] = None

    @classmethod
    def from_model(
        cls,
        workspace: Workspace,
        expand: bool = False,
        collaborators: Optional[List[CollaboratorResponse]] = None,
    ) -> "WorkspaceResponse":
        """
        With `expand`, `idea` and `owner` must be eager-loaded; the
        collaborator list is passed in already shaped.
        """
        response = cls(
            id=workspace.id,
            name=workspace.name,
            idea_id=workspace.idea_id,
            user_id=workspace.user_id,
            document=workspace.document,
            whiteboard=workspace.whiteboard,
            thumbnail=workspace.thumbnail,
            is_public=workspace.is_public,
            archived=workspace.archived,
            created_at=workspace.created_at,
            updated_at=workspace.updated_at,
            collaborators=collaborators,
        )
        if expand:
            response.idea = WorkspaceIdea.from_model(workspace.idea) if workspace.idea else None
            response.author = AuthorSummary.from_model(workspace.owner) if workspace.owner else None
        return response


class WorkspaceCreate(CamelModel):
    idea_id: Optional[str] = None
    user_id: Optional[str] = None
    name: Optional[str] = None
    is_public: Optional[bool] = None


class WorkspaceUpdate(CamelModel):
    document: Optional[Any] = None
    whiteboard: Optional[Any] = None
    name: Optional[str] = None
    archived: Optional[bool] = None
    thumbnail: Optional[str] = None


# ── Access views ──────────────────────────────────────────────────────────


class PermissionFlags(CamelModel):
    can_view: bool
    can_edit: bool
    is_owner: bool
    is_collaborator: bool
    role: Optional[str] = None

    @classmethod
    def from_permissions(cls, permissions) -> "PermissionFlags":
        """Takes the IdeaPermissions resolved by services.access."""
        return cls(
            can_view=permissions.can_view,
            can_edit=permissions.can_edit,
            is_owner=permissions.is_owner,
            is_collaborator=permissions.is_collaborator,
            role=permissions.role,
        )


class IdeaAccessView(CamelModel):
    id: str
    title: str
    description: str
    visibility: str
    status: str
    author: Optional[AuthorSummary] = None
    collaborators: List[CollaboratorResponse] = []


class WorkspacePermissionsResponse(CamelModel):
    """workspace-permissions: the idea, its workspace (or None) and the caller's rights."""

    idea: IdeaAccessView
    workspace: Optional[WorkspaceResponse] = None
    permissions: PermissionFlags


class IdeaWithCollaborators(IdeaResponse):
    collaborators: List[CollaboratorResponse] = []


class IdeaWorkspaceResponse(CamelModel):
    idea: IdeaWithCollaborators
    workspace: WorkspaceResponse
    workspace_id: str
