"""Initial schema — personas, follows, persona_sessions.

Revision ID: 001_persona_graph
Revises: None
Create Date: 2026-10-18

No foreign keys between the tables: cascades are issued by the integrity
coordinator. Uniqueness of handles and of ordered follow pairs is enforced
here so concurrent creates cannot both succeed.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_persona_graph"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "personas",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("account_username", sa.String(64), nullable=False),
        sa.Column("handle", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("handle", name="uq_personas_handle"),
    )
    op.create_index("ix_personas_account_username", "personas", ["account_username"])

    op.create_table(
        "follows",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("follower_id", UUID(as_uuid=True), nullable=False),
        sa.Column("following_id", UUID(as_uuid=True), nullable=False),
        sa.Column("followed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
    )
    op.create_index("ix_follows_follower_id", "follows", ["follower_id"])
    op.create_index("ix_follows_following_id", "follows", ["following_id"])

    op.create_table(
        "persona_sessions",
        sa.Column("session_key", sa.String(128), primary_key=True),
        sa.Column("account_username", sa.String(64), nullable=False),
        sa.Column("persona_id", UUID(as_uuid=True), nullable=False),
        sa.Column("bound_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_persona_sessions_account_username", "persona_sessions", ["account_username"])
    op.create_index("ix_persona_sessions_persona_id", "persona_sessions", ["persona_id"])


def downgrade() -> None:
    op.drop_table("persona_sessions")
    op.drop_table("follows")
    op.drop_table("personas")
