"""
Idea Hub Backend — Comment Service Tests
=========================================
"""

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from ideahub.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ideahub.models import Comment, Notification
from ideahub.schemas.comment import CommentCreate, CommentUpdate
from ideahub.services.comment_service import comment_service


@pytest_asyncio.fixture
async def thread(db_manager, make_user, make_idea, as_caller):
    """Alice's idea with Bob's top-level comment."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    idea = await make_idea(alice, "Discuss me")
    async with db_manager.session() as db:
        top = await comment_service.create_comment(
            db, as_caller(bob), CommentCreate(content="first!", idea_id=idea.id)
        )
    return alice, bob, idea, top


class TestCommentThreads:

    @pytest.mark.asyncio
    async def test_reply_nested_under_parent(self, db_manager, thread, as_caller):
        alice, bob, idea, top = thread
        async with db_manager.session() as db:
            reply = await comment_service.create_comment(
                db, as_caller(alice), CommentCreate(content="thanks", idea_id=idea.id, parent_id=top.id)
            )
        async with db_manager.session() as db:
            tree = await comment_service.list_comments(db, idea.id)

        assert [c.id for c in tree] == [top.id]
        assert [r.id for r in tree[0].replies] == [reply.id]
        assert tree[0].author.username == "bob"
        assert tree[0].replies[0].author.username == "alice"

    @pytest.mark.asyncio
    async def test_parent_on_other_idea_rejected(self, db_manager, thread, make_idea, as_caller):
        alice, bob, idea, top = thread
        other = await make_idea(alice, "Elsewhere")
        async with db_manager.session() as db:
            with pytest.raises(ValidationError):
                await comment_service.create_comment(
                    db, as_caller(bob), CommentCreate(content="x", idea_id=other.id, parent_id=top.id)
                )

    @pytest.mark.asyncio
    async def test_missing_fields(self, mock_db_session, as_caller, make_user):
        bob = await make_user("bob")
        with pytest.raises(ValidationError):
            await comment_service.create_comment(mock_db_session, as_caller(bob), CommentCreate(content="x"))
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_comment_notifies_idea_author(self, db_manager, thread):
        alice, bob, idea, top = thread
        async with db_manager.session() as db:
            notes = (await db.execute(select(Notification).where(Notification.user_id == alice.id))).scalars().all()
        assert [n.type for n in notes] == ["COMMENT"]
        assert notes[0].related_user_id == bob.id


class TestCommentEdits:

    @pytest.mark.asyncio
    async def test_only_author_can_edit(self, db_manager, thread, as_caller):
        alice, bob, idea, top = thread
        async with db_manager.session() as db:
            with pytest.raises(PermissionDeniedError):
                await comment_service.update_comment(db, top.id, as_caller(alice), CommentUpdate(content="no"))
        async with db_manager.session() as db:
            edited = await comment_service.update_comment(db, top.id, as_caller(bob), CommentUpdate(content="edited"))
        assert edited.content == "edited"

    @pytest.mark.asyncio
    async def test_delete_removes_replies(self, db_manager, thread, as_caller):
        alice, bob, idea, top = thread
        async with db_manager.session() as db:
            await comment_service.create_comment(
                db, as_caller(alice), CommentCreate(content="reply", idea_id=idea.id, parent_id=top.id)
            )
        async with db_manager.session() as db:
            await comment_service.delete_comment(db, top.id, as_caller(bob))
        async with db_manager.session() as db:
            count = (await db.execute(select(func.count(Comment.id)))).scalar()
        assert count == 0


class TestVotes:

    @pytest.mark.asyncio
    async def test_votes_accumulate_without_guard(self, db_manager, thread):
        _, _, _, top = thread
        for delta in (1, 1, 5, -3):
            async with db_manager.session() as db:
                result = await comment_service.vote(db, top.id, delta)
        assert result.votes == 4

    @pytest.mark.asyncio
    async def test_vote_on_missing_comment(self, db_manager):
        async with db_manager.session() as db:
            with pytest.raises(NotFoundError):
                await comment_service.vote(db, "missing", 1)
