"""Initial schema — plan catalog, clients, activity and audit tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # ── Standalone tables (no FKs) ─────────────────────────────────────

    op.create_table(
        "insurance_plans",
        sa.Column("company_name", sa.String(200), nullable=False, index=True),
        sa.Column("product_name", sa.String(200), nullable=False),
        sa.Column("product_category", sa.String(100), nullable=False, index=True),
        sa.Column("product_price", sa.Numeric(10, 2), nullable=False, comment="Monthly premium"),
        sa.Column("product_benefits", sa.Text(), nullable=False, server_default=""),
        sa.Column("available_states", postgresql.ARRAY(sa.String(2)), comment="Empty = all states"),
        sa.Column("disqualifying_health_conditions", postgresql.ARRAY(sa.String(200))),
        sa.Column("disqualifying_medications", postgresql.ARRAY(sa.String(200))),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("product_price >= 0", name="ck_insurance_plans_price_non_negative"),
    )

    op.create_table(
        "health_conditions",
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "medications",
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "user_activity",
        sa.Column("broker_id", sa.String(100), nullable=False, index=True),
        sa.Column("activity_type", sa.String(50), nullable=False, comment="ActivityType enum value"),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text())),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "audit_log",
        sa.Column("event_type", sa.String(100), nullable=False, index=True),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("actor_id", sa.String(100), comment="Broker username or 'system'"),
        sa.Column("actor_role", sa.String(50), comment="broker, system"),
        sa.Column("source_module", sa.String(100)),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text())),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # ── Clients ────────────────────────────────────────────────────────

    op.create_table(
        "clients",
        sa.Column("broker_id", sa.String(100), nullable=False, index=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("gender", sa.String(20)),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("zip_code", sa.String(10)),
        sa.Column("state", sa.String(2), index=True),
        sa.Column("height", sa.Numeric(6, 2), comment="Inches"),
        sa.Column("weight", sa.Numeric(6, 2), comment="Pounds"),
        sa.Column("health_conditions", postgresql.ARRAY(sa.String(200))),
        sa.Column("medications", postgresql.ARRAY(sa.String(200))),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "dependents",
        sa.Column(
            "client_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("relationship", sa.String(20), nullable=False),
        sa.Column("full_name", sa.String(200)),
        sa.Column("gender", sa.String(20)),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("height", sa.Numeric(6, 2)),
        sa.Column("weight", sa.Numeric(6, 2)),
        sa.Column("health_conditions", postgresql.ARRAY(sa.String(200))),
        sa.Column("medications", postgresql.ARRAY(sa.String(200))),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # At most one spouse per client
    op.create_index(
        "uq_dependents_one_spouse",
        "dependents",
        ["client_id"],
        unique=True,
        postgresql_where=sa.text("relationship = 'spouse'"),
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_index("uq_dependents_one_spouse", table_name="dependents")
    op.drop_table("dependents")
    op.drop_table("clients")
    op.drop_table("audit_log")
    op.drop_table("user_activity")
    op.drop_table("medications")
    op.drop_table("health_conditions")
    op.drop_table("insurance_plans")
