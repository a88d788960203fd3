"""Add journals and moods tables

Revision ID: 002_add_journals_and_moods
Revises: 001_initial_schema
Create Date: 2026-10-19

Private wellness records: journal entries with an optional mood label and
standalone mood check-ins, both owned by a user.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "002_add_journals_and_moods"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "journals",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_journals_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("mood", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_journals"),
    )
    op.create_index("ix_journals_user_id", "journals", ["user_id"])

    op.create_table(
        "moods",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_moods_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("mood", sa.String(50), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_moods"),
    )
    op.create_index("ix_moods_user_date", "moods", ["user_id", "date"])


def downgrade() -> None:
    op.drop_index("ix_moods_user_date", table_name="moods")
    op.drop_table("moods")
    op.drop_index("ix_journals_user_id", table_name="journals")
    op.drop_table("journals")
