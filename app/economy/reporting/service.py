from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.rentals_repo import RentalsRepo
from app.db.repo.reporting_repo import ReportingRepo
from app.db.repo.users_repo import UsersRepo
from app.db.repo.video_jobs_repo import VideoJobsRepo
from app.economy.inputs import to_money
from app.economy.reporting.types import AdminRentalRow, AdminSnapshot, RecentTransaction, WalletRanking

ADMIN_RENTALS_LIMIT = 500


class ReportingService:
    """Read-only rollups for the admin dashboard; never writes."""

    @staticmethod
    async def build_admin_snapshot(
        session: AsyncSession,
        *,
        recent_limit: int = 10,
        top_limit: int = 5,
        now_utc: datetime | None = None,
    ) -> AdminSnapshot:
        total_users = await UsersRepo.count_total(session)
        active_rentals = await ReportingRepo.count_active_rentals(session)
        total_video_jobs = await VideoJobsRepo.count_total(session)
        rental_revenue = await ReportingRepo.sum_rental_revenue(session)
        wallet_balance = await ReportingRepo.sum_wallet_balances(session)
        deposits_completed = await ReportingRepo.sum_completed_deposits(session)
        recent_rows = await ReportingRepo.list_recent_transactions(session, limit=max(1, recent_limit))
        top_rows = await ReportingRepo.list_top_wallets(session, limit=max(1, top_limit))

        return AdminSnapshot(
            generated_at=now_utc or datetime.now(timezone.utc),
            total_users=total_users,
            active_rentals=active_rentals,
            total_video_jobs=total_video_jobs,
            rental_revenue_total=to_money(rental_revenue),
            wallet_balance_total=to_money(wallet_balance),
            deposits_completed_total=to_money(deposits_completed),
            recent_transactions=[
                RecentTransaction(
                    transaction_id=transaction.id,
                    user_id=transaction.user_id,
                    email=email,
                    tx_type=transaction.tx_type,
                    amount=transaction.amount,
                    status=transaction.status,
                    note=transaction.note,
                    created_at=transaction.created_at,
                )
                for transaction, email in recent_rows
            ],
            top_wallets=[
                WalletRanking(
                    wallet_id=wallet.id,
                    user_id=wallet.user_id,
                    email=email,
                    balance=wallet.balance,
                    currency=wallet.currency,
                )
                for wallet, email in top_rows
            ],
        )

    @staticmethod
    async def list_rentals_with_users(
        session: AsyncSession,
        *,
        limit: int = ADMIN_RENTALS_LIMIT,
    ) -> list[AdminRentalRow]:
        rows = await RentalsRepo.list_all_rentals_with_users(
            session,
            limit=max(1, min(ADMIN_RENTALS_LIMIT, int(limit))),
        )
        return [
            AdminRentalRow(
                rental_id=rental.id,
                user_id=rental.user_id,
                email=email,
                plan_code=plan.code,
                plan_name=plan.name,
                months=rental.months,
                total_price=rental.total_price,
                status=rental.status,
                starts_at=rental.starts_at,
                ends_at=rental.ends_at,
                created_at=rental.created_at,
            )
            for rental, plan, email in rows
        ]
