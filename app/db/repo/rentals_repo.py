from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.rental_plans import RentalPlan
from app.db.models.user_rentals import UserRental
from app.db.models.users import User


class RentalsRepo:
    @staticmethod
    async def list_active_plans(session: AsyncSession) -> list[RentalPlan]:
        stmt = (
            select(RentalPlan)
            .where(RentalPlan.active.is_(True))
            .order_by(RentalPlan.monthly_price.asc(), RentalPlan.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_active_plan_by_code(session: AsyncSession, code: str) -> RentalPlan | None:
        stmt = select(RentalPlan).where(RentalPlan.code == code, RentalPlan.active.is_(True))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def expire_active_for_user(session: AsyncSession, *, user_id: int) -> int:
        stmt = (
            update(UserRental)
            .where(UserRental.user_id == user_id, UserRental.status == "active")
            .values(status="expired")
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def create_rental(session: AsyncSession, *, rental: UserRental) -> UserRental:
        session.add(rental)
        await session.flush()
        return rental

    @staticmethod
    async def get_active_rental_with_plan(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> tuple[UserRental, RentalPlan] | None:
        stmt = (
            select(UserRental, RentalPlan)
            .join(RentalPlan, RentalPlan.id == UserRental.plan_id)
            .where(UserRental.user_id == user_id, UserRental.status == "active")
            .order_by(UserRental.created_at.desc(), UserRental.id.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    @staticmethod
    async def list_rentals_with_plans(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> list[tuple[UserRental, RentalPlan]]:
        stmt = (
            select(UserRental, RentalPlan)
            .join(RentalPlan, RentalPlan.id == UserRental.plan_id)
            .where(UserRental.user_id == user_id)
            .order_by(UserRental.created_at.desc(), UserRental.id.desc())
        )
        result = await session.execute(stmt)
        return [(rental, plan) for rental, plan in result.all()]

    @staticmethod
    async def list_all_rentals_with_users(
        session: AsyncSession,
        *,
        limit: int,
    ) -> list[tuple[UserRental, RentalPlan, str]]:
        stmt = (
            select(UserRental, RentalPlan, User.email)
            .join(RentalPlan, RentalPlan.id == UserRental.plan_id)
            .join(User, User.id == UserRental.user_id)
            .order_by(UserRental.created_at.desc(), UserRental.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(rental, plan, str(email)) for rental, plan, email in result.all()]

    @staticmethod
    async def list_user_ids_with_elapsed_active(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int,
    ) -> list[int]:
        stmt = (
            select(UserRental.user_id)
            .where(UserRental.status == "active", UserRental.ends_at <= now_utc)
            .distinct()
            .order_by(UserRental.user_id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [int(user_id) for user_id in result.scalars().all()]

    @staticmethod
    async def expire_elapsed_for_user(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(UserRental)
            .where(
                UserRental.user_id == user_id,
                UserRental.status == "active",
                UserRental.ends_at <= now_utc,
            )
            .values(status="expired")
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
