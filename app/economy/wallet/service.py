from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.wallet_accounts import WalletAccount
from app.db.models.wallet_transactions import WalletTransaction
from app.db.repo.users_repo import UsersRepo
from app.db.repo.wallet_repo import WalletRepo
from app.economy.errors import UserNotFoundError
from app.economy.inputs import NOTE_MAX_LENGTH, parse_deposit_amount, safe_text
from app.economy.wallet.types import DepositResult, WalletSnapshot, WalletTransactionSnapshot

logger = structlog.get_logger(__name__)

TX_TYPE_DEPOSIT = "deposit"
TX_STATUS_COMPLETED = "completed"


def _wallet_snapshot(account: WalletAccount) -> WalletSnapshot:
    return WalletSnapshot(
        wallet_id=account.id,
        user_id=account.user_id,
        balance=account.balance,
        currency=account.currency,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def _transaction_snapshot(transaction: WalletTransaction) -> WalletTransactionSnapshot:
    return WalletTransactionSnapshot(
        transaction_id=transaction.id,
        wallet_id=transaction.wallet_id,
        user_id=transaction.user_id,
        tx_type=transaction.tx_type,
        amount=transaction.amount,
        status=transaction.status,
        note=transaction.note,
        created_at=transaction.created_at,
        metadata=dict(transaction.metadata_ or {}),
    )


class WalletService:
    @staticmethod
    async def _ensure_account(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime,
    ) -> WalletAccount:
        account = await WalletRepo.get_account_by_user_id(session, user_id)
        if account is not None:
            return account

        if await UsersRepo.get_by_id(session, user_id) is None:
            raise UserNotFoundError

        # A concurrent first access may win the insert; the unique user_id absorbs it.
        created_id = await WalletRepo.insert_account_if_absent(
            session,
            user_id=user_id,
            currency=get_settings().wallet_default_currency,
            now_utc=now_utc,
        )
        account = await WalletRepo.get_account_by_user_id(session, user_id)
        if account is None:
            raise RuntimeError(f"wallet account for user {user_id} vanished after upsert")

        if created_id is not None:
            logger.info("wallet_account_created", user_id=user_id, wallet_id=account.id)
        return account

    @staticmethod
    async def ensure_wallet(
        session: AsyncSession,
        *,
        user_id: int,
        now_utc: datetime | None = None,
    ) -> WalletSnapshot:
        account = await WalletService._ensure_account(
            session,
            user_id=user_id,
            now_utc=now_utc or datetime.now(timezone.utc),
        )
        return _wallet_snapshot(account)

    @staticmethod
    async def get_balance(session: AsyncSession, *, user_id: int) -> WalletSnapshot:
        return await WalletService.ensure_wallet(session, user_id=user_id)

    @staticmethod
    async def deposit(
        session: AsyncSession,
        *,
        user_id: int,
        amount: object,
        note: object = None,
        metadata: Mapping[str, object] | None = None,
        now_utc: datetime | None = None,
    ) -> DepositResult:
        """Credit ``amount`` to the user's wallet and append the matching ledger row.

        Both writes happen in the caller's transaction; the balance moves with a
        relative ``balance = balance + amount`` update so concurrent deposits to
        one wallet serialize on the row lock instead of overwriting each other.
        """
        settings = get_settings()
        deposit_amount = parse_deposit_amount(amount, max_amount=settings.wallet_max_deposit)
        deposit_note = safe_text(note, NOTE_MAX_LENGTH) or None
        now = now_utc or datetime.now(timezone.utc)

        account = await WalletService._ensure_account(session, user_id=user_id, now_utc=now)
        balance_after = await WalletRepo.increment_balance(
            session,
            wallet_id=account.id,
            amount=deposit_amount,
            now_utc=now,
        )
        await session.refresh(account)

        transaction = await WalletRepo.create_transaction(
            session,
            transaction=WalletTransaction(
                wallet_id=account.id,
                user_id=user_id,
                tx_type=TX_TYPE_DEPOSIT,
                amount=deposit_amount,
                status=TX_STATUS_COMPLETED,
                note=deposit_note,
                metadata_={**dict(metadata or {}), "balance_after": str(balance_after)},
                created_at=now,
            ),
        )

        logger.info(
            "wallet_deposit_completed",
            user_id=user_id,
            wallet_id=account.id,
            transaction_id=transaction.id,
            amount=str(deposit_amount),
            balance_after=str(balance_after),
        )
        return DepositResult(
            wallet=_wallet_snapshot(account),
            transaction=_transaction_snapshot(transaction),
        )

    @staticmethod
    async def list_transactions(
        session: AsyncSession,
        *,
        user_id: int,
        limit: int | None = None,
    ) -> list[WalletTransactionSnapshot]:
        max_limit = get_settings().wallet_transactions_limit
        resolved_limit = max(1, min(max_limit, int(limit or max_limit)))

        account = await WalletRepo.get_account_by_user_id(session, user_id)
        if account is None:
            return []

        transactions = await WalletRepo.list_transactions_for_wallet(
            session,
            wallet_id=account.id,
            limit=resolved_limit,
        )
        return [_transaction_snapshot(transaction) for transaction in transactions]
