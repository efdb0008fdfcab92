"""
Idea Hub Backend — Idea Schemas
================================

What:  Request bodies for create / update / fork, the listing filters and the
       idea response shape (author expanded, tags flattened to names,
       `isStarred` computed for the caller).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ideahub.models.idea import Idea
from ideahub.schemas.common import CamelModel
from ideahub.schemas.user import AuthorSummary


class IdeaResponse(CamelModel):
    id: str
    title: str
    description: str
    content: str
    canvas_data: Optional[str] = None
    author_id: str
    author: Optional[AuthorSummary] = None
    tags: List[str] = []
    category: str
    language: Optional[str] = None
    license: str
    version: str
    visibility: str
    status: str
    stars: int
    forks: int
    is_fork: bool
    forked_from: Optional[str] = None
    is_starred: bool = False
    # Number of comments on the idea, replies included
    comments: int = 0
    last_edited_at: Optional[datetime] = None
    last_edited_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, idea: Idea, is_starred: bool = False, comments: int = 0) -> "IdeaResponse":
        """Expects `author` and `tag_rows` to be eager-loaded."""
        return cls(
            id=idea.id,
            title=idea.title,
            description=idea.description,
            content=idea.content,
            canvas_data=idea.canvas_data,
            author_id=idea.author_id,
            author=AuthorSummary.from_model(idea.author) if idea.author is not None else None,
            tags=idea.tags,
            category=idea.category,
            language=idea.language,
            license=idea.license,
            version=idea.version,
            visibility=idea.visibility,
            status=idea.status,
            stars=idea.stars,
            forks=idea.forks,
            is_fork=idea.is_fork,
            forked_from=idea.forked_from,
            is_starred=is_starred,
            comments=comments,
            last_edited_at=idea.last_edited_at,
            last_edited_by=idea.last_edited_by,
            created_at=idea.created_at,
            updated_at=idea.updated_at,
        )


class IdeaCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    content: str = ""
    canvas_data: Optional[str] = None
    tags: List[str] = []
    language: Optional[str] = None
    license: Optional[str] = None
    version: Optional[str] = None
    visibility: Optional[str] = None
    status: Optional[str] = None


class IdeaUpdate(CamelModel):
    """Partial update; only keys present in the body are written."""

    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    canvas_data: Optional[str] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = None
    language: Optional[str] = None
    license: Optional[str] = None
    version: Optional[str] = None
    visibility: Optional[str] = None
    status: Optional[str] = None


class IdeaForkRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass
class IdeaFilters:
    """
    Listing filters shared by GET /api/ideas and the ideas-list function.

    `category` / `language` of "all" or "" mean no filter. `tags` matches
    ideas carrying ANY of the names.
    """

    category: Optional[str] = None
    language: Optional[str] = None
    search: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    author_id: Optional[str] = None
    visibility: Optional[str] = None
    status: Optional[str] = None
    sort: Optional[str] = None


def parse_tags(raw: Optional[str]) -> List[str]:
    """Splits a comma-separated query value into trimmed, non-empty tag names."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]
