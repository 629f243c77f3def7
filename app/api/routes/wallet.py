from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from app.api.access import require_identity
from app.core.config import get_settings
from app.economy.transactions import atomic
from app.economy.wallet.service import WalletService
from app.economy.wallet.types import WalletSnapshot, WalletTransactionSnapshot

router = APIRouter(tags=["wallet"])


class DepositRequest(BaseModel):
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    note: str | None = Field(default=None, max_length=2000)


class WalletResponse(BaseModel):
    wallet_id: int
    user_id: int
    balance: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime


class WalletTransactionResponse(BaseModel):
    transaction_id: int
    wallet_id: int
    tx_type: str
    amount: Decimal
    status: str
    note: str | None = None
    metadata: dict[str, object] = Field(default_factory=dict)
    created_at: datetime


class DepositResponse(BaseModel):
    message: str
    wallet: WalletResponse
    transaction: WalletTransactionResponse


class WalletTransactionListResponse(BaseModel):
    transactions: list[WalletTransactionResponse]


def _wallet_as_response(wallet: WalletSnapshot) -> WalletResponse:
    return WalletResponse(
        wallet_id=wallet.wallet_id,
        user_id=wallet.user_id,
        balance=wallet.balance,
        currency=wallet.currency,
        created_at=wallet.created_at,
        updated_at=wallet.updated_at,
    )


def _transaction_as_response(transaction: WalletTransactionSnapshot) -> WalletTransactionResponse:
    return WalletTransactionResponse(
        transaction_id=transaction.transaction_id,
        wallet_id=transaction.wallet_id,
        tx_type=transaction.tx_type,
        amount=transaction.amount,
        status=transaction.status,
        note=transaction.note,
        metadata=transaction.metadata,
        created_at=transaction.created_at,
    )


@router.get("/wallet", response_model=WalletResponse)
async def get_wallet(request: Request) -> WalletResponse:
    identity = require_identity(request)
    async with atomic("wallet_get_balance") as session:
        wallet = await WalletService.get_balance(session, user_id=identity.user_id)
    return _wallet_as_response(wallet)


@router.post("/wallet/deposit", response_model=DepositResponse)
async def deposit(payload: DepositRequest, request: Request) -> DepositResponse:
    identity = require_identity(request)
    async with atomic("wallet_deposit") as session:
        result = await WalletService.deposit(
            session,
            user_id=identity.user_id,
            amount=payload.amount,
            note=payload.note,
            metadata={"source": "api"},
        )
    return DepositResponse(
        message="Deposit completed",
        wallet=_wallet_as_response(result.wallet),
        transaction=_transaction_as_response(result.transaction),
    )


@router.get("/wallet/transactions", response_model=WalletTransactionListResponse)
async def list_wallet_transactions(
    request: Request,
    limit: int | None = Query(default=None, ge=1),
) -> WalletTransactionListResponse:
    identity = require_identity(request)
    async with atomic("wallet_list_transactions") as session:
        transactions = await WalletService.list_transactions(
            session,
            user_id=identity.user_id,
            limit=limit or get_settings().wallet_transactions_limit,
        )
    return WalletTransactionListResponse(
        transactions=[_transaction_as_response(transaction) for transaction in transactions]
    )
