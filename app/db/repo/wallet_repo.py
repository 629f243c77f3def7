from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.wallet_accounts import WalletAccount
from app.db.models.wallet_transactions import WalletTransaction


class WalletRepo:
    @staticmethod
    async def insert_account_if_absent(
        session: AsyncSession,
        *,
        user_id: int,
        currency: str,
        now_utc: datetime,
    ) -> int | None:
        stmt = (
            pg_insert(WalletAccount)
            .values(
                user_id=user_id,
                balance=Decimal("0"),
                currency=currency,
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=[WalletAccount.user_id])
            .returning(WalletAccount.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_account_by_user_id(session: AsyncSession, user_id: int) -> WalletAccount | None:
        stmt = select(WalletAccount).where(WalletAccount.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def increment_balance(
        session: AsyncSession,
        *,
        wallet_id: int,
        amount: Decimal,
        now_utc: datetime,
    ) -> Decimal:
        stmt = (
            update(WalletAccount)
            .where(WalletAccount.id == wallet_id)
            .values(balance=WalletAccount.balance + amount, updated_at=now_utc)
            .returning(WalletAccount.balance)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def create_transaction(
        session: AsyncSession,
        *,
        transaction: WalletTransaction,
    ) -> WalletTransaction:
        session.add(transaction)
        await session.flush()
        return transaction

    @staticmethod
    async def list_transactions_for_wallet(
        session: AsyncSession,
        *,
        wallet_id: int,
        limit: int,
    ) -> list[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.wallet_id == wallet_id)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

