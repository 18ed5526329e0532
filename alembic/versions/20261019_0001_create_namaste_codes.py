"""Create namaste_codes table.

Revision ID: 20261019_0001
Revises: 
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "namaste_codes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category", sa.String(length=40), nullable=True),
        sa.Column("code", sa.String(length=40), nullable=True),
        sa.Column("code_title", sa.Text(), nullable=True),
        sa.Column("code_description", sa.Text(), nullable=True),
        sa.Column("tm2_code", sa.String(length=40), nullable=True),
        sa.Column("tm2_title", sa.Text(), nullable=True),
        sa.Column("tm2_definition", sa.Text(), nullable=True),
        sa.Column("tm2_link", sa.Text(), nullable=True),
        sa.Column("biomedicine_code", sa.String(length=40), nullable=True),
        sa.Column("biomedicine_title", sa.Text(), nullable=True),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        sa.Column("mapping_confidence", sa.String(length=10), nullable=True),
        sa.Column("mapping_type", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index(op.f("ix_namaste_codes_category"), "namaste_codes", ["category"], unique=False)
    op.create_index("ix_namaste_codes_code", "namaste_codes", ["code"], unique=False)
    op.create_index("ix_namaste_codes_tm2_code", "namaste_codes", ["tm2_code"], unique=False)
    op.create_index("ix_namaste_codes_code_title", "namaste_codes", ["code_title"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_namaste_codes_code_title", table_name="namaste_codes")
    op.drop_index("ix_namaste_codes_tm2_code", table_name="namaste_codes")
    op.drop_index("ix_namaste_codes_code", table_name="namaste_codes")
    op.drop_index(op.f("ix_namaste_codes_category"), table_name="namaste_codes")
    op.drop_table("namaste_codes")
