"""
ORM models. Importing this package registers every table on Base.metadata
(Alembic's env.py and the test fixtures rely on that).
"""

from ideahub.models.collaborator import MAX_COLLABORATORS, Collaborator
from ideahub.models.comment import Comment
from ideahub.models.follow import Follow
from ideahub.models.enums import (
    CollaboratorRole,
    IdeaStatus,
    NotificationType,
    ServiceStatus,
    Visibility,
)
from ideahub.models.idea import Idea, IdeaTag, Star
from ideahub.models.notification import Notification
from ideahub.models.service import Service
from ideahub.models.user import User
from ideahub.models.workspace import Workspace, empty_document, empty_whiteboard

__all__ = [
    "MAX_COLLABORATORS",
    "Collaborator",
    "CollaboratorRole",
    "Comment",
    "Follow",
    "Idea",
    "IdeaStatus",
    "IdeaTag",
    "Notification",
    "NotificationType",
    "Service",
    "ServiceStatus",
    "Star",
    "User",
    "Visibility",
    "Workspace",
    "empty_document",
    "empty_whiteboard",
]
