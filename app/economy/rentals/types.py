from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class PlanSnapshot:
    plan_id: int
    code: str
    name: str
    monthly_price: Decimal
    max_video_jobs: int
    perks: str | None
    active: bool


@dataclass(frozen=True, slots=True)
class RentalSnapshot:
    rental_id: int
    user_id: int
    plan_id: int
    months: int
    total_price: Decimal
    status: str
    starts_at: datetime
    ends_at: datetime
    created_at: datetime


@dataclass(frozen=True, slots=True)
class SubscribeResult:
    rental: RentalSnapshot
    plan: PlanSnapshot
    expired_rentals: int


@dataclass(frozen=True, slots=True)
class RentalWithPlan:
    rental: RentalSnapshot
    plan: PlanSnapshot


@dataclass(frozen=True, slots=True)
class QuotaDecision:
    allowed: bool
    plan_code: str | None
    limit: int | None
    used: int | None


@dataclass(frozen=True, slots=True)
class RentalExpirySweepResult:
    expired_rentals: int
    users_reset: int
