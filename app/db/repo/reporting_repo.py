from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.user_rentals import UserRental
from app.db.models.users import User
from app.db.models.wallet_accounts import WalletAccount
from app.db.models.wallet_transactions import WalletTransaction


class ReportingRepo:
    @staticmethod
    async def count_active_rentals(session: AsyncSession) -> int:
        stmt = select(func.count(UserRental.id)).where(UserRental.status == "active")
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def sum_rental_revenue(session: AsyncSession) -> Decimal:
        stmt = select(func.coalesce(func.sum(UserRental.total_price), 0))
        result = await session.execute(stmt)
        return Decimal(result.scalar_one() or 0)

    @staticmethod
    async def sum_wallet_balances(session: AsyncSession) -> Decimal:
        stmt = select(func.coalesce(func.sum(WalletAccount.balance), 0))
        result = await session.execute(stmt)
        return Decimal(result.scalar_one() or 0)

    @staticmethod
    async def sum_completed_deposits(session: AsyncSession) -> Decimal:
        stmt = select(func.coalesce(func.sum(WalletTransaction.amount), 0)).where(
            WalletTransaction.tx_type == "deposit",
            WalletTransaction.status == "completed",
        )
        result = await session.execute(stmt)
        return Decimal(result.scalar_one() or 0)

    @staticmethod
    async def list_recent_transactions(
        session: AsyncSession,
        *,
        limit: int,
    ) -> list[tuple[WalletTransaction, str]]:
        stmt = (
            select(WalletTransaction, User.email)
            .join(User, User.id == WalletTransaction.user_id)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(transaction, str(email)) for transaction, email in result.all()]

    @staticmethod
    async def list_top_wallets(
        session: AsyncSession,
        *,
        limit: int,
    ) -> list[tuple[WalletAccount, str]]:
        stmt = (
            select(WalletAccount, User.email)
            .join(User, User.id == WalletAccount.user_id)
            .order_by(WalletAccount.balance.desc(), WalletAccount.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(wallet, str(email)) for wallet, email in result.all()]
