"""
Idea Hub Backend — Comment Tree Tests
======================================

build_comment_tree is pure: it works on CommentResponse objects, so these
tests need no database.
"""

from datetime import datetime, timedelta, timezone

from ideahub.schemas.comment import CommentResponse
from ideahub.services.comment_service import build_comment_tree

BASE = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _comment(cid, minutes, parent_id=None):
    ts = BASE + timedelta(minutes=minutes)
    return CommentResponse(
        id=cid,
        content=f"comment {cid}",
        idea_id="idea-1",
        parent_id=parent_id,
        votes=0,
        created_at=ts,
        updated_at=ts,
    )


class TestBuildCommentTree:

    def test_reply_is_nested_not_top_level(self):
        tree = build_comment_tree([_comment("p", 0), _comment("r", 1, parent_id="p")])

        assert [c.id for c in tree] == ["p"]
        assert [r.id for r in tree[0].replies] == ["r"]

    def test_newest_first_at_every_level(self):
        flat = [
            _comment("old", 0),
            _comment("new", 10),
            _comment("old-reply-1", 1, parent_id="old"),
            _comment("old-reply-2", 5, parent_id="old"),
        ]
        tree = build_comment_tree(flat)

        assert [c.id for c in tree] == ["new", "old"]
        assert [r.id for r in tree[1].replies] == ["old-reply-2", "old-reply-1"]

    def test_nests_deeper_than_one_level(self):
        flat = [
            _comment("a", 0),
            _comment("b", 1, parent_id="a"),
            _comment("c", 2, parent_id="b"),
        ]
        tree = build_comment_tree(flat)

        assert tree[0].replies[0].replies[0].id == "c"

    def test_orphan_reply_is_dropped(self):
        tree = build_comment_tree([_comment("a", 0), _comment("x", 1, parent_id="missing")])

        assert [c.id for c in tree] == ["a"]
        assert tree[0].replies == []

    def test_input_is_not_mutated(self):
        parent = _comment("p", 0)
        build_comment_tree([parent, _comment("r", 1, parent_id="p")])

        assert parent.replies == []

    def test_equal_timestamps_are_ordered_by_id(self):
        tree = build_comment_tree([_comment("a", 0), _comment("b", 0)])

        assert [c.id for c in tree] == ["b", "a"]
