"""
Idea Hub Backend — Idea Service Tests
======================================

Runs against a real SQLite database (see conftest.db_manager).

What we test:
    ✅ Public listing only returns PUBLIC + PUBLISHED ideas
    ✅ Filters: category, language, search, tags
    ✅ Search treats % and _ as plain characters
    ✅ Comment counts, replies included
    ✅ Sort keys produce the documented order
    ✅ Pagination arithmetic and out-of-range pages
    ✅ Restricted filters need a caller and return only their ideas
    ✅ Create makes the companion workspace
    ✅ Private visibility, star/unstar, fork
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from ideahub.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ideahub.models import Collaborator, Comment, Idea, Notification, Workspace
from ideahub.schemas.idea import IdeaCreate, IdeaFilters, IdeaForkRequest, IdeaUpdate
from ideahub.services.idea_service import idea_service

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


class TestPublicListing:

    @pytest.mark.asyncio
    async def test_only_public_published(self, db_manager, make_user, make_idea):
        alice = await make_user("alice")
        await make_idea(alice, "visible")
        await make_idea(alice, "private", visibility="PRIVATE")
        await make_idea(alice, "draft", status="DRAFT")
        await make_idea(alice, "archived", status="ARCHIVED")

        async with db_manager.session() as db:
            ideas, pagination = await idea_service.list_public_ideas(
                db, IdeaFilters(visibility="PRIVATE", status="DRAFT")
            )

        assert [i.title for i in ideas] == ["visible"]
        assert all(i.visibility == "PUBLIC" and i.status == "PUBLISHED" for i in ideas)
        assert pagination.total == 1

    @pytest.mark.asyncio
    async def test_filters(self, db_manager, make_user, make_idea):
        alice = await make_user("alice")
        await make_idea(alice, "Graph engine", category="technology", language="python", tags=["ai", "db"])
        await make_idea(alice, "Garden planner", category="lifestyle", language="go", tags=["home"])
        await make_idea(alice, "Other", description="uses a GRAPH too", category="technology")

        async with db_manager.session() as db:
            by_category, _ = await idea_service.list_public_ideas(db, IdeaFilters(category="lifestyle"))
            by_language, _ = await idea_service.list_public_ideas(db, IdeaFilters(language="python"))
            by_search, _ = await idea_service.list_public_ideas(db, IdeaFilters(search="graph"))
            by_tags, _ = await idea_service.list_public_ideas(db, IdeaFilters(tags=["home", "db"]))
            everything, _ = await idea_service.list_public_ideas(db, IdeaFilters(category="all"))

        assert [i.title for i in by_category] == ["Garden planner"]
        assert [i.title for i in by_language] == ["Graph engine"]
        assert {i.title for i in by_search} == {"Graph engine", "Other"}
        assert {i.title for i in by_tags} == {"Graph engine", "Garden planner"}
        assert len(everything) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term, expected", [("%", ["100% uptime"]), ("_", [])])
    async def test_search_wildcards_match_literally(self, db_manager, make_user, make_idea, term, expected):
        alice = await make_user("alice")
        await make_idea(alice, "Solar panels")
        await make_idea(alice, "100% uptime")

        async with db_manager.session() as db:
            ideas, pagination = await idea_service.list_public_ideas(db, IdeaFilters(search=term))

        assert [i.title for i in ideas] == expected
        assert pagination.total == len(expected)

    @pytest.mark.asyncio
    async def test_comment_counts(self, db_manager, make_user, make_idea):
        alice = await make_user("alice")
        talked = await make_idea(alice, "Talked about")
        await make_idea(alice, "Quiet")
        async with db_manager.session() as db:
            first = Comment(content="first", author_id=alice.id, idea_id=talked.id)
            db.add(first)
            await db.flush()
            db.add(Comment(content="reply", author_id=alice.id, idea_id=talked.id, parent_id=first.id))

        async with db_manager.session() as db:
            ideas, _ = await idea_service.list_public_ideas(db, IdeaFilters())
            single = await idea_service.get_idea(db, talked.id, None)

        assert {i.title: i.comments for i in ideas} == {"Talked about": 2, "Quiet": 0}
        assert single.comments == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "sort, expected",
        [
            ("newest", ["c", "b", "a"]),
            ("oldest", ["a", "b", "c"]),
            ("most-stars", ["b", "a", "c"]),
            ("most-forks", ["c", "a", "b"]),
            ("recently-updated", ["a", "c", "b"]),
            ("nonsense", ["c", "b", "a"]),
        ],
    )
    async def test_sort_keys(self, db_manager, make_user, make_idea, sort, expected):
        alice = await make_user("alice")
        await make_idea(alice, "a", created_at=T0, updated_at=T0 + timedelta(days=9), stars=5, forks=2)
        await make_idea(alice, "b", created_at=T0 + timedelta(days=1), updated_at=T0 + timedelta(days=1), stars=9, forks=0)
        await make_idea(alice, "c", created_at=T0 + timedelta(days=2), updated_at=T0 + timedelta(days=3), stars=1, forks=7)

        async with db_manager.session() as db:
            ideas, _ = await idea_service.list_public_ideas(db, IdeaFilters(sort=sort))

        assert [i.title for i in ideas] == expected

    @pytest.mark.asyncio
    async def test_pagination(self, db_manager, make_user, make_idea):
        alice = await make_user("alice")
        for n in range(5):
            await make_idea(alice, f"idea-{n}", created_at=T0 + timedelta(hours=n))

        async with db_manager.session() as db:
            page2, meta = await idea_service.list_public_ideas(db, IdeaFilters(), page=2, limit=2)
            beyond, beyond_meta = await idea_service.list_public_ideas(db, IdeaFilters(), page=9, limit=2)

        assert [i.title for i in page2] == ["idea-2", "idea-1"]
        assert (meta.page, meta.limit, meta.total, meta.total_pages) == (2, 2, 5, 3)
        assert beyond == []
        assert beyond_meta.total == 5


class TestCallerListing:

    @pytest.mark.asyncio
    async def test_restricted_filters_need_caller(self, mock_db_session):
        with pytest.raises(AuthenticationError):
            await idea_service.list_ideas(mock_db_session, IdeaFilters(visibility="PRIVATE"), None)
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_restricted_filters_scope_to_caller(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await make_idea(alice, "alice draft", status="DRAFT")
        await make_idea(bob, "bob draft", status="DRAFT")

        async with db_manager.session() as db:
            ideas = await idea_service.list_ideas(db, IdeaFilters(status="draft"), as_caller(alice))

        assert [i.title for i in ideas] == ["alice draft"]

    @pytest.mark.asyncio
    async def test_is_starred_flag(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        bob = await make_user("bob")
        starred = await make_idea(alice, "starred")
        await make_idea(alice, "plain")

        async with db_manager.session() as db:
            await idea_service.star_idea(db, starred.id, as_caller(bob))
        async with db_manager.session() as db:
            ideas = await idea_service.list_ideas(db, IdeaFilters(), as_caller(bob))

        flags = {i.title: i.is_starred for i in ideas}
        assert flags == {"starred": True, "plain": False}


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_makes_workspace(self, db_manager, make_user):
        alice = await make_user("alice")

        async with db_manager.session() as db:
            idea = await idea_service.create_idea(
                db,
                alice.id,
                IdeaCreate(title="Solar kite", description="Fly it", category="energy", tags=["sun", "sun", " "]),
            )

        assert idea.author.username == "alice"
        assert idea.tags == ["sun"]
        assert idea.visibility == "PUBLIC" and idea.status == "PUBLISHED"
        async with db_manager.session() as db:
            workspace = (await db.execute(select(Workspace).where(Workspace.idea_id == idea.id))).scalar_one()
        assert workspace.name == "Solar kite"
        assert workspace.document == {}
        assert workspace.whiteboard == {"elements": [], "appState": {}}

    @pytest.mark.asyncio
    async def test_create_requires_fields(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await idea_service.create_idea(mock_db_session, "u1", IdeaCreate(title="x"))
        assert exc_info.value.context["missing"] == ["description", "category"]
        mock_db_session.add.assert_not_called()


class TestVisibilityAndEdits:

    @pytest.mark.asyncio
    async def test_private_idea_access(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        bob = await make_user("bob")
        carol = await make_user("carol")
        secret = await make_idea(alice, "secret", visibility="PRIVATE")
        async with db_manager.session() as db:
            db.add(Collaborator(idea_id=secret.id, user_id=carol.id))

        async with db_manager.session() as db:
            with pytest.raises(AuthenticationError):
                await idea_service.get_idea(db, secret.id, None)
            with pytest.raises(PermissionDeniedError):
                await idea_service.get_idea(db, secret.id, as_caller(bob))
            assert (await idea_service.get_idea(db, secret.id, as_caller(carol))).title == "secret"
            assert (await idea_service.get_idea(db, secret.id, as_caller(alice))).title == "secret"

    @pytest.mark.asyncio
    async def test_missing_idea(self, db_manager):
        async with db_manager.session() as db:
            with pytest.raises(NotFoundError):
                await idea_service.get_idea(db, "nope", None)

    @pytest.mark.asyncio
    async def test_update_is_author_only_and_partial(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        bob = await make_user("bob")
        idea = await make_idea(alice, "before", tags=["a", "b"])

        async with db_manager.session() as db:
            with pytest.raises(PermissionDeniedError):
                await idea_service.update_idea(db, idea.id, as_caller(bob), IdeaUpdate(title="hijack"))

        async with db_manager.session() as db:
            updated = await idea_service.update_idea(
                db, idea.id, as_caller(alice), IdeaUpdate(title="after", tags=["b", "c"])
            )

        assert updated.title == "after"
        assert updated.description == "About before"
        assert updated.tags == ["b", "c"]
        assert updated.last_edited_by == alice.id

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db_manager, make_user, as_caller):
        alice = await make_user("alice")
        async with db_manager.session() as db:
            idea = await idea_service.create_idea(
                db, alice.id, IdeaCreate(title="t", description="d", category="c")
            )
        async with db_manager.session() as db:
            await idea_service.delete_idea(db, idea.id, as_caller(alice))
        async with db_manager.session() as db:
            remaining = (await db.execute(select(func.count(Workspace.id)))).scalar()
        assert remaining == 0


class TestStarsAndForks:

    @pytest.mark.asyncio
    async def test_star_and_unstar(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        bob = await make_user("bob")
        idea = await make_idea(alice, "shiny")

        async with db_manager.session() as db:
            starred = await idea_service.star_idea(db, idea.id, as_caller(bob))
        assert starred.stars == 1 and starred.is_starred

        async with db_manager.session() as db:
            with pytest.raises(ValidationError):
                await idea_service.star_idea(db, idea.id, as_caller(bob))

        async with db_manager.session() as db:
            unstarred = await idea_service.unstar_idea(db, idea.id, as_caller(bob))
        assert unstarred.stars == 0 and not unstarred.is_starred

        async with db_manager.session() as db:
            with pytest.raises(ValidationError):
                await idea_service.unstar_idea(db, idea.id, as_caller(bob))
            notes = (await db.execute(select(Notification).where(Notification.user_id == alice.id))).scalars().all()
        assert [n.type for n in notes] == ["STAR"]

    @pytest.mark.asyncio
    async def test_self_star_sends_no_notification(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        idea = await make_idea(alice, "mine")
        async with db_manager.session() as db:
            await idea_service.star_idea(db, idea.id, as_caller(alice))
            count = (await db.execute(select(func.count(Notification.id)))).scalar()
        assert count == 0

    @pytest.mark.asyncio
    async def test_fork(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        bob = await make_user("bob")
        source = await make_idea(alice, "Original", tags=["x"])

        async with db_manager.session() as db:
            fork = await idea_service.fork_idea(db, source.id, as_caller(bob), IdeaForkRequest())

        assert fork.title == "Fork of Original"
        assert fork.is_fork and fork.forked_from == source.id
        assert fork.author_id == bob.id
        assert fork.tags == ["x"]
        async with db_manager.session() as db:
            parent = await db.get(Idea, source.id)
            assert parent.forks == 1
            workspace = (await db.execute(select(Workspace).where(Workspace.idea_id == fork.id))).scalar_one()
            assert workspace.user_id == bob.id
            notes = (await db.execute(select(Notification.type).where(Notification.user_id == alice.id))).scalars().all()
        assert notes == ["FORK"]

    @pytest.mark.asyncio
    async def test_private_ideas_cannot_be_forked(self, db_manager, make_user, make_idea, as_caller):
        alice = await make_user("alice")
        secret = await make_idea(alice, "secret", visibility="PRIVATE")
        async with db_manager.session() as db:
            with pytest.raises(PermissionDeniedError):
                await idea_service.fork_idea(db, secret.id, as_caller(alice), IdeaForkRequest())
