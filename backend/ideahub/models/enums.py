"""
Enumerated column values.

Stored as plain VARCHAR columns (the values below); the enums keep the
allowed spellings in one place for services and schemas.
"""

import enum


class Visibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class IdeaStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class CollaboratorRole(str, enum.Enum):
    OWNER = "OWNER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


class NotificationType(str, enum.Enum):
    STAR = "STAR"
    FORK = "FORK"
    COMMENT = "COMMENT"
    MENTION = "MENTION"
    FOLLOW = "FOLLOW"
    ISSUE = "ISSUE"


class ServiceStatus(str, enum.Enum):
    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    DOWN = "DOWN"
    UNKNOWN = "UNKNOWN"
