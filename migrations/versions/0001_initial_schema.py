"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_email", sa.String(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("setup", "drawn", name="game_status"),
            nullable=False,
            server_default="setup",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("drawn_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("exclusion_participant_id", sa.Integer(), nullable=True),
        sa.Column("assigned_to_participant_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["exclusion_participant_id"],
            ["participants.id"],
            name="participants_exclusion_participant_id_fkey",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["assigned_to_participant_id"],
            ["participants.id"],
            name="participants_assigned_to_participant_id_fkey",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("game_id", "email", name="uq_participants_game_email"),
    )
    op.create_index("ix_participants_game_id", "participants", ["game_id"])


def downgrade() -> None:
    op.drop_index("ix_participants_game_id", table_name="participants")
    op.drop_table("participants")
    op.drop_table("games")
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS game_status")
