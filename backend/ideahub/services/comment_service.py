"""
Idea Hub Backend — Comment Service
===================================

What:  Comment threads on ideas: list as a tree, create (top-level or reply),
       edit, delete (replies go with it) and vote.

Tree assembly:
    Comments are fetched flat for one idea, authors eager-loaded, and
    `build_comment_tree` nests them by parent id. Every level is ordered
    newest first. A reply whose parent is not in the list is dropped rather
    than promoted to the top level.

Voting:
    UPDATE comments SET votes = votes + :delta. Any integer delta is
    accepted and nothing stops the same caller from voting repeatedly.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ideahub.database import db_operation
from ideahub.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ideahub.models.comment import Comment
from ideahub.models.enums import NotificationType
from ideahub.models.idea import Idea
from ideahub.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from ideahub.security import CallerIdentity
from ideahub.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def build_comment_tree(comments: List[CommentResponse]) -> List[CommentResponse]:
    """
    Nests a flat list of comments by `parent_id`.

    Returns the top-level comments; each node's `replies` holds its children.
    Input objects are not modified.
    """
    nodes: Dict[str, CommentResponse] = {
        c.id: c.model_copy(update={"replies": []}) for c in comments
    }
    ordered = sorted(nodes.values(), key=lambda c: (c.created_at, c.id), reverse=True)

    roots: List[CommentResponse] = []
    for node in ordered:
        if node.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(node.parent_id)
        if parent is not None:
            parent.replies.append(node)
    return roots


class CommentService:

    async def _load(self, db: AsyncSession, comment_id: str) -> Comment:
        result = await db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.author))
            .execution_options(populate_existing=True)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=comment_id)
        return comment

    def _ensure_author(self, comment: Comment, caller: CallerIdentity, action: str) -> None:
        if comment.author_id != caller.user_id:
            raise PermissionDeniedError(f"You can only {action} your own comments")

    @db_operation("Could not retrieve comments. Please try again.")
    async def list_comments(self, db: AsyncSession, idea_id: str) -> List[CommentResponse]:
        result = await db.execute(
            select(Comment)
            .where(Comment.idea_id == idea_id)
            .options(selectinload(Comment.author))
        )
        flat = [CommentResponse.from_model(c) for c in result.scalars().all()]
        return build_comment_tree(flat)

    @db_operation("Could not post the comment. Please try again.")
    async def create_comment(
        self, db: AsyncSession, caller: CallerIdentity, payload: CommentCreate
    ) -> CommentResponse:
        missing = [
            name
            for name, value in (("content", payload.content), ("ideaId", payload.idea_id))
            if not value
        ]
        if missing:
            raise ValidationError.missing_fields(missing)

        idea = await db.get(Idea, payload.idea_id)
        if idea is None:
            raise NotFoundError(resource="idea", resource_id=payload.idea_id)

        if payload.parent_id:
            parent = await db.get(Comment, payload.parent_id)
            if parent is None or parent.idea_id != payload.idea_id:
                raise ValidationError(
                    "Parent comment must belong to the same idea", field="parentId"
                )

        comment = Comment(
            content=payload.content,
            author_id=caller.user_id,
            idea_id=payload.idea_id,
            parent_id=payload.parent_id or None,
        )
        db.add(comment)
        await db.flush()

        if idea.author_id != caller.user_id:
            await notification_service.create_notification(
                db,
                user_id=idea.author_id,
                type=NotificationType.COMMENT,
                message=f'{caller.username or "Someone"} commented on "{idea.title}"',
                related_user_id=caller.user_id,
                related_idea_id=idea.id,
                related_url=f"/ideas/{idea.id}#comment-{comment.id}",
            )

        logger.info("Comment %s created on idea %s", comment.id, idea.id)
        return CommentResponse.from_model(await self._load(db, comment.id))

    @db_operation("Could not update the comment.")
    async def update_comment(
        self, db: AsyncSession, comment_id: str, caller: CallerIdentity, payload: CommentUpdate
    ) -> CommentResponse:
        if not payload.content:
            raise ValidationError.missing_fields(["content"])
        comment = await self._load(db, comment_id)
        self._ensure_author(comment, caller, "edit")
        comment.content = payload.content
        await db.flush()
        return CommentResponse.from_model(comment)

    @db_operation("Could not delete the comment.")
    async def delete_comment(self, db: AsyncSession, comment_id: str, caller: CallerIdentity) -> None:
        comment = await self._load(db, comment_id)
        self._ensure_author(comment, caller, "delete")
        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by %s", comment_id, caller.user_id)

    @db_operation("Could not record the vote.")
    async def vote(self, db: AsyncSession, comment_id: str, delta: int) -> CommentResponse:
        result = await db.execute(
            update(Comment)
            .where(Comment.id == comment_id)
            .values(votes=Comment.votes + delta)
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="comment", resource_id=comment_id)
        return CommentResponse.from_model(await self._load(db, comment_id))


comment_service = CommentService()
