from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class RecentTransaction:
    transaction_id: int
    user_id: int
    email: str
    tx_type: str
    amount: Decimal
    status: str
    note: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class WalletRanking:
    wallet_id: int
    user_id: int
    email: str
    balance: Decimal
    currency: str


@dataclass(frozen=True, slots=True)
class AdminRentalRow:
    rental_id: int
    user_id: int
    email: str
    plan_code: str
    plan_name: str
    months: int
    total_price: Decimal
    status: str
    starts_at: datetime
    ends_at: datetime
    created_at: datetime


@dataclass(frozen=True, slots=True)
class AdminSnapshot:
    generated_at: datetime
    total_users: int
    active_rentals: int
    total_video_jobs: int
    rental_revenue_total: Decimal
    wallet_balance_total: Decimal
    deposits_completed_total: Decimal
    recent_transactions: list[RecentTransaction] = field(default_factory=list)
    top_wallets: list[WalletRanking] = field(default_factory=list)
