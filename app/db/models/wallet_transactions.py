from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DDL,
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    event,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import AppendOnlyMixin, Base

WALLET_TRANSACTIONS_APPEND_ONLY_FUNCTION_SQL = """
CREATE OR REPLACE FUNCTION fn_wallet_transactions_append_only()
RETURNS trigger
LANGUAGE plpgsql
AS $$
BEGIN
    RAISE EXCEPTION 'wallet_transactions is append-only';
END;
$$;
"""

WALLET_TRANSACTIONS_APPEND_ONLY_TRIGGER_SQL = """
CREATE TRIGGER trg_wallet_transactions_append_only
BEFORE UPDATE OR DELETE ON wallet_transactions
FOR EACH ROW
EXECUTE FUNCTION fn_wallet_transactions_append_only();
"""


class WalletTransaction(AppendOnlyMixin, Base):
    __tablename__ = "wallet_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_transactions_amount_positive"),
        CheckConstraint("tx_type IN ('deposit')", name="ck_wallet_transactions_tx_type"),
        CheckConstraint("status IN ('completed')", name="ck_wallet_transactions_status"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    wallet_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("wallet_accounts.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    tx_type: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default=text("'completed'"))
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)
    metadata_: Mapped[dict[str, object]] = mapped_column(
        "metadata",
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


Index(
    "idx_wallet_transactions_wallet_id",
    WalletTransaction.wallet_id,
    WalletTransaction.created_at.desc(),
)
Index(
    "idx_wallet_transactions_user_id",
    WalletTransaction.user_id,
    WalletTransaction.created_at.desc(),
)

event.listen(
    WalletTransaction.__table__,
    "after_create",
    DDL(WALLET_TRANSACTIONS_APPEND_ONLY_FUNCTION_SQL).execute_if(dialect="postgresql"),
)
event.listen(
    WalletTransaction.__table__,
    "after_create",
    DDL(WALLET_TRANSACTIONS_APPEND_ONLY_TRIGGER_SQL).execute_if(dialect="postgresql"),
)
