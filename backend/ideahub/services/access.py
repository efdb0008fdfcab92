"""
Idea Hub Backend — Idea Access Rules
=====================================

What:  Who may see and who may edit an idea and its workspaces.

    view   PUBLIC idea → anyone
           PRIVATE idea → author or collaborator (401 anonymous, 403 others)
    edit   idea author, or collaborator with role EDITOR / OWNER

    workspace view   public workspace → anyone
                     otherwise workspace owner or idea collaborator

Shared by the idea service and the workspace access functions.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.exceptions import AuthenticationError, PermissionDeniedError
from ideahub.models.collaborator import Collaborator
from ideahub.models.enums import CollaboratorRole, Visibility
from ideahub.models.idea import Idea
from ideahub.models.workspace import Workspace
from ideahub.security import CallerIdentity

EDITING_ROLES = frozenset({CollaboratorRole.EDITOR.value, CollaboratorRole.OWNER.value})


@dataclass(frozen=True)
class IdeaPermissions:
    can_view: bool
    can_edit: bool
    is_owner: bool
    is_collaborator: bool
    role: Optional[str]


async def collaborator_role(db: AsyncSession, idea_id: str, user_id: str) -> Optional[str]:
    """Role of `user_id` on the idea, or None when not a collaborator."""
    result = await db.execute(
        select(Collaborator.role).where(
            Collaborator.idea_id == idea_id, Collaborator.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def resolve_permissions(
    db: AsyncSession, idea: Idea, caller: Optional[CallerIdentity]
) -> IdeaPermissions:
    user_id = caller.user_id if caller else None
    is_owner = user_id is not None and idea.author_id == user_id
    role = await collaborator_role(db, idea.id, user_id) if user_id else None
    is_collaborator = role is not None

    if is_owner:
        role = CollaboratorRole.OWNER.value
    can_view = idea.visibility == Visibility.PUBLIC.value or is_owner or is_collaborator
    can_edit = is_owner or (role in EDITING_ROLES)
    return IdeaPermissions(
        can_view=can_view,
        can_edit=can_edit,
        is_owner=is_owner,
        is_collaborator=is_collaborator,
        role=role,
    )


def ensure_can_view(permissions: IdeaPermissions, caller: Optional[CallerIdentity]) -> None:
    """
    Raises:
        AuthenticationError: private idea, anonymous caller.
        PermissionDeniedError: private idea, caller neither author nor collaborator.
    """
    if permissions.can_view:
        return
    if caller is None:
        raise AuthenticationError("Authentication required to view this idea")
    raise PermissionDeniedError("You do not have access to this idea")


async def ensure_can_view_workspace(
    db: AsyncSession, workspace: Workspace, caller: Optional[CallerIdentity]
) -> None:
    if workspace.is_public:
        return
    if caller is None:
        raise AuthenticationError("Authentication required to view this workspace")
    if workspace.user_id == caller.user_id:
        return
    if await collaborator_role(db, workspace.idea_id, caller.user_id) is not None:
        return
    raise PermissionDeniedError("You do not have permission to view this workspace")
