from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from app.api.access import require_admin
from app.core.config import get_settings
from app.economy.reporting.service import ReportingService
from app.economy.transactions import atomic
from app.services.user_accounts import UserAccountsService, UserSnapshot

router = APIRouter(prefix="/admin", tags=["admin"])


class UserProvisionRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    role: str = Field(default="user", min_length=1, max_length=20)


class RoleUpdateRequest(BaseModel):
    role: str = Field(min_length=1, max_length=20)


class UserResponse(BaseModel):
    user_id: int
    email: str
    role: str
    plan: str
    created_at: datetime


class UserListResponse(BaseModel):
    users: list[UserResponse]


class RecentTransactionResponse(BaseModel):
    transaction_id: int
    user_id: int
    email: str
    tx_type: str
    amount: Decimal
    status: str
    note: str | None = None
    created_at: datetime


class WalletRankingResponse(BaseModel):
    wallet_id: int
    user_id: int
    email: str
    balance: Decimal
    currency: str


class DashboardResponse(BaseModel):
    generated_at: datetime
    total_users: int
    active_rentals: int
    total_video_jobs: int
    rental_revenue_total: Decimal
    wallet_balance_total: Decimal
    deposits_completed_total: Decimal
    recent_transactions: list[RecentTransactionResponse]
    top_wallets: list[WalletRankingResponse]


class AdminRentalResponse(BaseModel):
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


class AdminRentalListResponse(BaseModel):
    rentals: list[AdminRentalResponse]


def _user_as_response(user: UserSnapshot) -> UserResponse:
    return UserResponse(
        user_id=user.user_id,
        email=user.email,
        role=user.role,
        plan=user.plan,
        created_at=user.created_at,
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(request: Request) -> DashboardResponse:
    require_admin(request)
    settings = get_settings()
    async with atomic("admin_dashboard") as session:
        snapshot = await ReportingService.build_admin_snapshot(
            session,
            recent_limit=settings.admin_recent_transactions_limit,
            top_limit=settings.admin_top_wallets_limit,
        )

    return DashboardResponse(
        generated_at=snapshot.generated_at,
        total_users=snapshot.total_users,
        active_rentals=snapshot.active_rentals,
        total_video_jobs=snapshot.total_video_jobs,
        rental_revenue_total=snapshot.rental_revenue_total,
        wallet_balance_total=snapshot.wallet_balance_total,
        deposits_completed_total=snapshot.deposits_completed_total,
        recent_transactions=[
            RecentTransactionResponse(
                transaction_id=item.transaction_id,
                user_id=item.user_id,
                email=item.email,
                tx_type=item.tx_type,
                amount=item.amount,
                status=item.status,
                note=item.note,
                created_at=item.created_at,
            )
            for item in snapshot.recent_transactions
        ],
        top_wallets=[
            WalletRankingResponse(
                wallet_id=item.wallet_id,
                user_id=item.user_id,
                email=item.email,
                balance=item.balance,
                currency=item.currency,
            )
            for item in snapshot.top_wallets
        ],
    )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    request: Request,
    limit: int = Query(default=500, ge=1, le=500),
) -> UserListResponse:
    require_admin(request)
    async with atomic("admin_list_users") as session:
        users = await UserAccountsService.list_users(session, limit=limit)
    return UserListResponse(users=[_user_as_response(user) for user in users])


@router.get("/rentals", response_model=AdminRentalListResponse)
async def list_rentals(
    request: Request,
    limit: int = Query(default=500, ge=1, le=500),
) -> AdminRentalListResponse:
    require_admin(request)
    async with atomic("admin_list_rentals") as session:
        rows = await ReportingService.list_rentals_with_users(session, limit=limit)
    return AdminRentalListResponse(
        rentals=[
            AdminRentalResponse(
                rental_id=row.rental_id,
                user_id=row.user_id,
                email=row.email,
                plan_code=row.plan_code,
                plan_name=row.plan_name,
                months=row.months,
                total_price=row.total_price,
                status=row.status,
                starts_at=row.starts_at,
                ends_at=row.ends_at,
                created_at=row.created_at,
            )
            for row in rows
        ]
    )


@router.post("/users", response_model=UserResponse)
async def provision_user(payload: UserProvisionRequest, request: Request) -> UserResponse:
    require_admin(request)
    async with atomic("admin_provision_user") as session:
        user = await UserAccountsService.ensure_user(session, email=payload.email, role=payload.role)
    return _user_as_response(user)


@router.post("/users/{user_id}/role", response_model=UserResponse)
async def set_user_role(user_id: int, payload: RoleUpdateRequest, request: Request) -> UserResponse:
    require_admin(request)
    async with atomic("admin_set_user_role") as session:
        user = await UserAccountsService.set_role(session, user_id=user_id, role=payload.role)
    return _user_as_response(user)
