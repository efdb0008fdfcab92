"""Follows table and per-idea collaborator slots

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 12:00:00.000000+00:00

Adds `ideas.collaborator_count`, backfilled from idea_collaborators, and the
`follows` table behind the follow / unfollow function.

Rollback: downgrade() drops both (the follow graph is lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("ideas") as batch:
        batch.add_column(
            sa.Column("collaborator_count", sa.Integer(), nullable=False, server_default="0")
        )
    op.execute(
        "UPDATE ideas SET collaborator_count = "
        "(SELECT count(*) FROM idea_collaborators WHERE idea_collaborators.idea_id = ideas.id)"
    )

    op.create_table(
        "follows",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "follower_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "following_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
    )
    op.create_index("idx_follows_following", "follows", ["following_id"])


def downgrade() -> None:
    op.drop_index("idx_follows_following", table_name="follows")
    op.drop_table("follows")
    with op.batch_alter_table("ideas") as batch:
        batch.drop_column("collaborator_count")
