"""m1_wallet_and_rentals_core

Revision ID: 3a1f5c7e9b20
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3a1f5c7e9b20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("plan", sa.String(50), nullable=False, server_default=sa.text("'free'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("role IN ('user','admin')", name="ck_users_role"),
        sa.CheckConstraint("email = lower(btrim(email))", name="ck_users_email_normalized"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "wallet_accounts",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("balance", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("currency", sa.String(12), nullable=False, server_default=sa.text("'THB'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("balance >= 0", name="ck_wallet_accounts_balance_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("user_id", name="uq_wallet_accounts_user_id"),
    )

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("wallet_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("tx_type", sa.String(30), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'completed'")),
        sa.Column("note", sa.String(255), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_wallet_transactions_amount_positive"),
        sa.CheckConstraint("tx_type IN ('deposit')", name="ck_wallet_transactions_tx_type"),
        sa.CheckConstraint("status IN ('completed')", name="ck_wallet_transactions_status"),
        sa.ForeignKeyConstraint(["wallet_id"], ["wallet_accounts.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index(
        "idx_wallet_transactions_wallet_id",
        "wallet_transactions",
        ["wallet_id", sa.text("created_at DESC")],
    )
    op.create_index(
        "idx_wallet_transactions_user_id",
        "wallet_transactions",
        ["user_id", sa.text("created_at DESC")],
    )
    op.execute(
        """
        CREATE OR REPLACE FUNCTION fn_wallet_transactions_append_only()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            RAISE EXCEPTION 'wallet_transactions is append-only';
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_wallet_transactions_append_only
        BEFORE UPDATE OR DELETE ON wallet_transactions
        FOR EACH ROW
        EXECUTE FUNCTION fn_wallet_transactions_append_only();
        """
    )

    op.create_table(
        "rental_plans",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("monthly_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("max_video_jobs", sa.Integer(), nullable=False),
        sa.Column("perks", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("monthly_price > 0", name="ck_rental_plans_monthly_price_positive"),
        sa.CheckConstraint("max_video_jobs > 0", name="ck_rental_plans_max_video_jobs_positive"),
        sa.UniqueConstraint("code", name="uq_rental_plans_code"),
    )
    op.create_index("idx_rental_plans_active_price", "rental_plans", ["active", "monthly_price"])

    op.create_table(
        "user_rentals",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("plan_id", sa.BigInteger(), nullable=False),
        sa.Column("months", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("months >= 1 AND months <= 24", name="ck_user_rentals_months_range"),
        sa.CheckConstraint("total_price > 0", name="ck_user_rentals_total_price_positive"),
        sa.CheckConstraint("status IN ('active','expired')", name="ck_user_rentals_status"),
        sa.CheckConstraint("ends_at > starts_at", name="ck_user_rentals_period"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["plan_id"], ["rental_plans.id"]),
    )
    op.create_index("idx_user_rentals_user_created", "user_rentals", ["user_id", "created_at"])
    op.create_index("idx_user_rentals_status_ends", "user_rentals", ["status", "ends_at"])
    op.create_index(
        "uq_user_rentals_active_per_user",
        "user_rentals",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "video_jobs",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default=sa.text("'generated'")),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("idx_video_jobs_user_created", "video_jobs", ["user_id", "created_at"])

    op.execute(
        """
        INSERT INTO rental_plans (code, name, monthly_price, max_video_jobs, perks, active)
        VALUES
            ('starter', 'Starter', 299.00, 30, 'Basic AI script + video package generation', true),
            ('growth', 'Growth', 999.00, 150, 'Priority generation + richer storyboard', true),
            ('pro', 'Pro', 2499.00, 1000, 'Team-ready scaling + advanced automation', true)
        ON CONFLICT (code) DO NOTHING;
        """
    )


def downgrade() -> None:
    op.drop_index("idx_video_jobs_user_created", table_name="video_jobs")
    op.drop_table("video_jobs")

    op.drop_index("uq_user_rentals_active_per_user", table_name="user_rentals")
    op.drop_index("idx_user_rentals_status_ends", table_name="user_rentals")
    op.drop_index("idx_user_rentals_user_created", table_name="user_rentals")
    op.drop_table("user_rentals")

    op.drop_index("idx_rental_plans_active_price", table_name="rental_plans")
    op.drop_table("rental_plans")

    op.execute("DROP TRIGGER IF EXISTS trg_wallet_transactions_append_only ON wallet_transactions;")
    op.execute("DROP FUNCTION IF EXISTS fn_wallet_transactions_append_only();")
    op.drop_index("idx_wallet_transactions_user_id", table_name="wallet_transactions")
    op.drop_index("idx_wallet_transactions_wallet_id", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")

    op.drop_table("wallet_accounts")

    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
