"""Comment schemas. `replies` nests arbitrarily deep; see comment_service.build_comment_tree."""

from datetime import datetime
from typing import List, Optional

from ideahub.models.comment import Comment
from ideahub.schemas.common import CamelModel
from ideahub.schemas.user import AuthorSummary


class CommentResponse(CamelModel):
    id: str
    content: str
    author: Optional[AuthorSummary] = None
    idea_id: str
    parent_id: Optional[str] = None
    votes: int
    created_at: datetime
    updated_at: datetime
    replies: List["CommentResponse"] = []

    @classmethod
    def from_model(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            content=comment.content,
            author=AuthorSummary.from_model(comment.author) if comment.author is not None else None,
            idea_id=comment.idea_id,
            parent_id=comment.parent_id,
            votes=comment.votes,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class CommentCreate(CamelModel):
    content: Optional[str] = None
    idea_id: Optional[str] = None
    parent_id: Optional[str] = None


class CommentUpdate(CamelModel):
    content: Optional[str] = None


class VoteRequest(CamelModel):
    # Any integer; no bound and no per-user guard
    delta: int
