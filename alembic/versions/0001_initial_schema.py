"""Initial schema: moods, conversations, lines.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "moods",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("eyes", sa.CHAR(length=2), nullable=False),
        sa.Column("tongue", sa.CHAR(length=2), nullable=False),
    )
    op.create_index(
        "ux_moods_user_lower_name",
        "moods",
        ["user_id", sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("public_id", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("heading", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.UniqueConstraint("public_id", name="uq_conversations_public_id"),
    )
    op.create_index("ix_conversations_user_id", "conversations", ["user_id"])

    op.create_table(
        "lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("public_id", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("animal", sa.Text(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("think", sa.Boolean(), nullable=False),
        sa.Column("mood_name", sa.Text(), nullable=False),
        sa.Column("mood_id", sa.Integer(), nullable=True),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["mood_id"],
            ["moods.id"],
            name="fk_lines_mood",
        ),
        sa.ForeignKeyConstraint(
            ["conversation_id"],
            ["conversations.id"],
            name="fk_lines_conversation",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("public_id", name="uq_lines_public_id"),
    )
    op.create_index("ix_lines_mood_id", "lines", ["mood_id"])
    op.create_index("ix_lines_conversation_id", "lines", ["conversation_id"])


def downgrade() -> None:
    op.drop_index("ix_lines_conversation_id", table_name="lines")
    op.drop_index("ix_lines_mood_id", table_name="lines")
    op.drop_table("lines")
    op.drop_index("ix_conversations_user_id", table_name="conversations")
    op.drop_table("conversations")
    op.drop_index("ux_moods_user_lower_name", table_name="moods")
    op.drop_table("moods")
