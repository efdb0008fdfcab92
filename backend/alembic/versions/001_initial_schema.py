"""Initial Idea Hub schema

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

Creates users, ideas (+ tags, stars), comments, workspaces,
idea_collaborators, notifications and the service registry.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("avatar_url", sa.String(512), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("website", sa.String(512), nullable=True),
        sa.Column("followers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("following", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("public_repos", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("joined_at"),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "ideas",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("canvas_data", sa.Text(), nullable=True),
        _fk("author_id", "users.id"),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("language", sa.String(50), nullable=True),
        sa.Column("license", sa.String(50), nullable=False, server_default="MIT"),
        sa.Column("version", sa.String(20), nullable=False, server_default="1.0.0"),
        sa.Column("visibility", sa.String(20), nullable=False, server_default="PUBLIC"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PUBLISHED"),
        sa.Column("stars", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("forks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_fork", sa.Boolean(), nullable=False, server_default=sa.false()),
        _fk("forked_from", "ideas.id", ondelete="SET NULL", nullable=True),
        _ts("last_edited_at", nullable=True),
        sa.Column("last_edited_by", sa.String(36), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_ideas_author_id", "ideas", ["author_id"])
    op.create_index("idx_ideas_listing", "ideas", ["visibility", "status", "created_at"])

    op.create_table(
        "idea_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _fk("idea_id", "ideas.id"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.UniqueConstraint("idea_id", "name", name="uq_idea_tags_idea_name"),
    )
    op.create_index("idx_idea_tags_name", "idea_tags", ["name"])

    op.create_table(
        "stars",
        _id(),
        _fk("user_id", "users.id"),
        _fk("idea_id", "ideas.id"),
        _ts("created_at"),
        sa.UniqueConstraint("user_id", "idea_id", name="uq_stars_user_idea"),
    )

    op.create_table(
        "comments",
        _id(),
        sa.Column("content", sa.Text(), nullable=False),
        _fk("author_id", "users.id"),
        _fk("idea_id", "ideas.id"),
        _fk("parent_id", "comments.id", nullable=True),
        sa.Column("votes", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("idx_comments_idea_created", "comments", ["idea_id", "created_at"])

    op.create_table(
        "workspaces",
        _id(),
        sa.Column("name", sa.String(255), nullable=False, server_default="Untitled"),
        _fk("idea_id", "ideas.id"),
        _fk("user_id", "users.id"),
        sa.Column("document", sa.JSON(), nullable=True),
        sa.Column("whiteboard", sa.JSON(), nullable=True),
        sa.Column("thumbnail", sa.String(1024), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_workspaces_idea_id", "workspaces", ["idea_id"])
    op.create_index("ix_workspaces_user_id", "workspaces", ["user_id"])

    op.create_table(
        "idea_collaborators",
        _id(),
        _fk("idea_id", "ideas.id"),
        _fk("user_id", "users.id"),
        sa.Column("role", sa.String(20), nullable=False, server_default="VIEWER"),
        _ts("created_at"),
        sa.UniqueConstraint("idea_id", "user_id", name="uq_idea_collaborators_idea_user"),
    )
    op.create_index("ix_idea_collaborators_idea_id", "idea_collaborators", ["idea_id"])

    op.create_table(
        "notifications",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _fk("related_user_id", "users.id", ondelete="SET NULL", nullable=True),
        _fk("related_idea_id", "ideas.id", ondelete="SET NULL", nullable=True),
        sa.Column("related_url", sa.String(512), nullable=True),
        _ts("created_at"),
    )
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "services",
        _id(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("port", sa.Integer(), nullable=False),
        sa.Column("health_path", sa.String(255), nullable=False, server_default="/api/health"),
        sa.Column("version", sa.String(20), nullable=False, server_default="1.0.0"),
        sa.Column("base_url", sa.String(512), nullable=True),
        sa.Column("local_url", sa.String(512), nullable=True),
        sa.Column("dev_url", sa.String(512), nullable=True),
        sa.Column("prod_url", sa.String(512), nullable=True),
        sa.Column("environment", sa.String(20), nullable=False, server_default="development"),
        sa.Column("status", sa.String(20), nullable=False, server_default="UNKNOWN"),
        _ts("last_heartbeat", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )


def downgrade() -> None:
    for table in (
        "services",
        "notifications",
        "idea_collaborators",
        "workspaces",
        "comments",
        "stars",
        "idea_tags",
        "ideas",
        "users",
    ):
        op.drop_table(table)
