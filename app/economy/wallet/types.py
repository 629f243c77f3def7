from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class WalletSnapshot:
    wallet_id: int
    user_id: int
    balance: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class WalletTransactionSnapshot:
    transaction_id: int
    wallet_id: int
    user_id: int
    tx_type: str
    amount: Decimal
    status: str
    note: str | None
    created_at: datetime
    metadata: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DepositResult:
    wallet: WalletSnapshot
    transaction: WalletTransactionSnapshot
