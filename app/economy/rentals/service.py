from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.rental_plans import RentalPlan
from app.db.models.user_rentals import UserRental
from app.db.repo.rentals_repo import RentalsRepo
from app.db.repo.users_repo import UsersRepo
from app.db.repo.video_jobs_repo import VideoJobsRepo
from app.economy.errors import PlanNotFoundError, QuotaExceededError, UserNotFoundError
from app.economy.inputs import add_months, normalize_plan_code, parse_months, to_money
from app.economy.rentals.types import (
    PlanSnapshot,
    QuotaDecision,
    RentalExpirySweepResult,
    RentalSnapshot,
    RentalWithPlan,
    SubscribeResult,
)

logger = structlog.get_logger(__name__)

FREE_PLAN_CODE = "free"
RENTAL_STATUS_ACTIVE = "active"
EXPIRY_SWEEP_BATCH_SIZE = 500

ResourceCountFn = Callable[[AsyncSession, int], Awaitable[int]]


def _plan_snapshot(plan: RentalPlan) -> PlanSnapshot:
    return PlanSnapshot(
        plan_id=plan.id,
        code=plan.code,
        name=plan.name,
        monthly_price=plan.monthly_price,
        max_video_jobs=plan.max_video_jobs,
        perks=plan.perks,
        active=plan.active,
    )


def _rental_snapshot(rental: UserRental) -> RentalSnapshot:
    return RentalSnapshot(
        rental_id=rental.id,
        user_id=rental.user_id,
        plan_id=rental.plan_id,
        months=rental.months,
        total_price=rental.total_price,
        status=rental.status,
        starts_at=rental.starts_at,
        ends_at=rental.ends_at,
        created_at=rental.created_at,
    )


class RentalService:
    @staticmethod
    async def list_active_plans(session: AsyncSession) -> list[PlanSnapshot]:
        plans = await RentalsRepo.list_active_plans(session)
        return [_plan_snapshot(plan) for plan in plans]

    @staticmethod
    async def subscribe(
        session: AsyncSession,
        *,
        user_id: int,
        plan_code: object,
        months: object = 1,
        now_utc: datetime | None = None,
    ) -> SubscribeResult:
        """Switch the user to ``plan_code`` for ``months`` calendar months.

        Expiring the previous active rental, inserting the new one and updating
        the denormalized ``users.plan`` all run in the caller's transaction while
        the user row is locked, so concurrent subscribes for one user apply one
        after the other and never leave the user without an active rental.
        """
        code = normalize_plan_code(plan_code)
        resolved_months = parse_months(months, max_months=get_settings().rental_max_months)

        plan = await RentalsRepo.get_active_plan_by_code(session, code)
        if plan is None:
            raise PlanNotFoundError

        user = await UsersRepo.get_by_id_for_update(session, user_id)
        if user is None:
            raise UserNotFoundError

        now = now_utc or datetime.now(timezone.utc)
        expired_count = await RentalsRepo.expire_active_for_user(session, user_id=user_id)
        rental = await RentalsRepo.create_rental(
            session,
            rental=UserRental(
                user_id=user_id,
                plan_id=plan.id,
                months=resolved_months,
                total_price=to_money(plan.monthly_price * resolved_months),
                status=RENTAL_STATUS_ACTIVE,
                starts_at=now,
                ends_at=add_months(now, resolved_months),
                created_at=now,
            ),
        )
        user.plan = plan.code
        await session.flush()

        logger.info(
            "rental_subscribed",
            user_id=user_id,
            plan_code=plan.code,
            months=resolved_months,
            rental_id=rental.id,
            total_price=str(rental.total_price),
            expired_previous=expired_count,
        )
        return SubscribeResult(
            rental=_rental_snapshot(rental),
            plan=_plan_snapshot(plan),
            expired_rentals=expired_count,
        )

    @staticmethod
    async def get_active_rental(session: AsyncSession, *, user_id: int) -> RentalWithPlan | None:
        row = await RentalsRepo.get_active_rental_with_plan(session, user_id=user_id)
        if row is None:
            return None
        rental, plan = row
        return RentalWithPlan(rental=_rental_snapshot(rental), plan=_plan_snapshot(plan))

    @staticmethod
    async def list_rentals(session: AsyncSession, *, user_id: int) -> list[RentalWithPlan]:
        rows = await RentalsRepo.list_rentals_with_plans(session, user_id=user_id)
        return [
            RentalWithPlan(rental=_rental_snapshot(rental), plan=_plan_snapshot(plan))
            for rental, plan in rows
        ]

    @staticmethod
    async def check_quota(
        session: AsyncSession,
        *,
        user_id: int,
        resource_count_fn: ResourceCountFn | None = None,
    ) -> QuotaDecision:
        active = await RentalsRepo.get_active_rental_with_plan(session, user_id=user_id)
        if active is None:
            # No rental means no metered limit; callers gate resource creation themselves.
            return QuotaDecision(allowed=True, plan_code=None, limit=None, used=None)

        _, plan = active
        count_fn = resource_count_fn or VideoJobsRepo.count_for_user
        used = int(await count_fn(session, user_id))
        decision = QuotaDecision(
            allowed=used < plan.max_video_jobs,
            plan_code=plan.code,
            limit=plan.max_video_jobs,
            used=used,
        )
        if not decision.allowed:
            logger.info(
                "rental_quota_denied",
                user_id=user_id,
                plan_code=plan.code,
                limit=plan.max_video_jobs,
                used=used,
            )
        return decision

    @staticmethod
    async def ensure_quota(
        session: AsyncSession,
        *,
        user_id: int,
        resource_count_fn: ResourceCountFn | None = None,
    ) -> QuotaDecision:
        decision = await RentalService.check_quota(
            session,
            user_id=user_id,
            resource_count_fn=resource_count_fn,
        )
        if not decision.allowed:
            raise QuotaExceededError
        return decision

    @staticmethod
    async def expire_elapsed_rentals(
        session: AsyncSession,
        *,
        now_utc: datetime,
        batch_size: int = EXPIRY_SWEEP_BATCH_SIZE,
    ) -> RentalExpirySweepResult:
        user_ids = await RentalsRepo.list_user_ids_with_elapsed_active(
            session,
            now_utc=now_utc,
            limit=max(1, batch_size),
        )

        expired_total = 0
        users_reset = 0
        for user_id in user_ids:
            # Same lock order as subscribe: user row first, then its rentals.
            user = await UsersRepo.get_by_id_for_update(session, user_id)
            expired = await RentalsRepo.expire_elapsed_for_user(
                session,
                user_id=user_id,
                now_utc=now_utc,
            )
            if expired <= 0:
                continue
            expired_total += expired
            if user is not None and user.plan != FREE_PLAN_CODE:
                user.plan = FREE_PLAN_CODE
                users_reset += 1

        await session.flush()
        return RentalExpirySweepResult(expired_rentals=expired_total, users_reset=users_reset)
