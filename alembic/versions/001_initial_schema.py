"""initial schema - users, profiles, sessions, requests, quotations, notifications

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

For databases created by startup create_all: run `alembic stamp 001_initial`.
For NEW databases: run `alembic upgrade head`.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_users_role_active", "users", ["role", "is_active"])

    op.create_table(
        "customer_profiles",
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("address", sa.Text()),
        sa.Column("phone_number", sa.String(50)),
        sa.Column("is_federated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("profile_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "vendor_profiles",
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("company_name", sa.String(255)),
        sa.Column("owner_name", sa.String(255)),
        sa.Column("company_address", sa.Text()),
        sa.Column("contact_phone", sa.String(50)),
        sa.Column("description", sa.Text()),
        sa.Column("services_offered", sa.Text()),
        sa.Column("profile_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_status", sa.String(20), nullable=False, server_default="pending"),
    )
    op.create_table(
        "admin_profiles",
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("title", sa.String(100)),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token", sa.String(128), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_sessions_user", "sessions", ["user_id"])

    op.create_table(
        "quotation_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "customer_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("device_count", sa.Integer(), nullable=False),
        sa.Column("monthly_bill", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
        sa.Column("closed_at", sa.DateTime()),
    )
    op.create_index("ix_qreq_customer", "quotation_requests", ["customer_id"])
    op.create_index("ix_qreq_status_created", "quotation_requests", ["status", "created_at"])

    op.create_table(
        "vendor_quotations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "request_id", sa.Integer(),
            sa.ForeignKey("quotation_requests.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "vendor_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("installation_timeframe", sa.String(255), nullable=False),
        sa.Column("warranty_period", sa.String(255), nullable=False),
        sa.Column("document_url", sa.String(500)),
        sa.Column("notes", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="submitted"),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
        sa.UniqueConstraint("request_id", "vendor_id", name="uq_vquote_request_vendor"),
    )
    op.create_index("ix_vquote_vendor", "vendor_quotations", ["vendor_id"])
    op.create_index("ix_vquote_status", "vendor_quotations", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notification_type", sa.String(20), nullable=False),
        sa.Column("related_id", sa.Integer()),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])
    op.create_index("ix_notifications_user_created", "notifications", ["user_id", "created_at"])


def downgrade() -> None:
    """Drop all tables. ⚠️ DESTRUCTIVE — only for dev/test environments."""
    op.drop_table("notifications")
    op.drop_table("vendor_quotations")
    op.drop_table("quotation_requests")
    op.drop_table("sessions")
    op.drop_table("admin_profiles")
    op.drop_table("vendor_profiles")
    op.drop_table("customer_profiles")
    op.drop_table("users")
