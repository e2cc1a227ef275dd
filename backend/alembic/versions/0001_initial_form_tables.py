"""Initial schema — form layout and submissions.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "form_config",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False, unique=True),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "form_submissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500)),
        sa.Column("birthdate", sa.String(10)),
        sa.Column("about_you", sa.Text()),
        sa.Column("is_complete", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("last_updated", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_form_submissions_last_updated", "form_submissions", ["last_updated"]
    )


def downgrade() -> None:
    op.drop_index("ix_form_submissions_last_updated", table_name="form_submissions")
    op.drop_table("form_submissions")
    op.drop_table("form_config")
