"""Create users, markets, vendors and logs tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Initial schema for the market registry. Mirrors app/models/*; the app also
calls create_all() on startup, so this migration is for deployments that
manage schema through Alembic.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            comment="admin, officer, applicant, vendor, director, manager, supervisor",
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "markets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ref_no", sa.String(20), nullable=False, comment="Human-readable reference, MKT-XXXXXX"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("owner_name", sa.String(255), nullable=False),
        sa.Column("owner_id_no", sa.String(100), nullable=False),
        sa.Column("owner_phone", sa.String(50), nullable=False),
        sa.Column("owner_email", sa.String(255), nullable=True),
        sa.Column("owner_address", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, comment="Private, Public, Community"),
        sa.Column("size", sa.Float(), nullable=False, comment="Square meters"),
        sa.Column("stalls_count", sa.Integer(), nullable=False),
        sa.Column("year_established", sa.Integer(), nullable=True),
        sa.Column("operating_days", sa.String(100), nullable=False),
        sa.Column("operating_hours", sa.String(100), nullable=False),
        sa.Column("manager_name", sa.String(255), nullable=False),
        sa.Column("manager_contact", sa.String(100), nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
            comment="pending, recommended, approved, rejected",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ref_no"),
    )
    op.create_index("idx_markets_created_at", "markets", ["created_at"])

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ref_no", sa.String(20), nullable=False, comment="Human-readable reference, VND-XXXXXX"),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("market_id", sa.Integer(), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("national_id", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("business_type", sa.String(100), nullable=False),
        sa.Column("products", sa.Text(), nullable=False),
        sa.Column("stall_type", sa.String(50), nullable=True),
        sa.Column("stall_no", sa.String(50), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
            comment="pending, verified, approved, rejected",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["market_id"], ["markets.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ref_no"),
    )
    op.create_index("idx_vendors_created_at", "vendors", ["created_at"])

    op.create_table(
        "logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(255), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drops every registry table. Destructive: all records are lost."""
    op.drop_table("logs")
    op.drop_index("idx_vendors_created_at", table_name="vendors")
    op.drop_table("vendors")
    op.drop_index("idx_markets_created_at", table_name="markets")
    op.drop_table("markets")
    op.drop_table("users")
