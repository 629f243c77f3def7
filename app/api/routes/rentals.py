from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from app.api.access import require_identity
from app.economy.rentals.service import RentalService
from app.economy.rentals.types import PlanSnapshot, RentalSnapshot
from app.economy.transactions import atomic

router = APIRouter(tags=["rentals"])


class SubscribeRequest(BaseModel):
    plan_code: str = Field(min_length=1, max_length=50)
    months: int = Field(default=1, ge=1, le=24)


class PlanResponse(BaseModel):
    plan_id: int
    code: str
    name: str
    monthly_price: Decimal
    max_video_jobs: int
    perks: str | None = None


class RentalResponse(BaseModel):
    rental_id: int
    plan_id: int
    months: int
    total_price: Decimal
    status: str
    starts_at: datetime
    ends_at: datetime
    created_at: datetime


class RentalWithPlanResponse(BaseModel):
    rental: RentalResponse
    plan: PlanResponse


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]


class SubscribeResponse(BaseModel):
    message: str
    rental: RentalResponse
    plan: PlanResponse
    expired_rentals: int


class RentalListResponse(BaseModel):
    rentals: list[RentalWithPlanResponse]


class QuotaResponse(BaseModel):
    allowed: bool
    limit: int | None = None
    used: int | None = None


class EntitlementResponse(BaseModel):
    plan_code: str | None = None
    active_rental: RentalWithPlanResponse | None = None
    quota: QuotaResponse


def _plan_as_response(plan: PlanSnapshot) -> PlanResponse:
    return PlanResponse(
        plan_id=plan.plan_id,
        code=plan.code,
        name=plan.name,
        monthly_price=plan.monthly_price,
        max_video_jobs=plan.max_video_jobs,
        perks=plan.perks,
    )


def _rental_as_response(rental: RentalSnapshot) -> RentalResponse:
    return RentalResponse(
        rental_id=rental.rental_id,
        plan_id=rental.plan_id,
        months=rental.months,
        total_price=rental.total_price,
        status=rental.status,
        starts_at=rental.starts_at,
        ends_at=rental.ends_at,
        created_at=rental.created_at,
    )


@router.get("/rent/plans", response_model=PlanListResponse)
async def list_plans(request: Request) -> PlanListResponse:
    require_identity(request)
    async with atomic("rental_list_plans") as session:
        plans = await RentalService.list_active_plans(session)
    return PlanListResponse(plans=[_plan_as_response(plan) for plan in plans])


@router.post("/rent/subscribe", response_model=SubscribeResponse)
async def subscribe(payload: SubscribeRequest, request: Request) -> SubscribeResponse:
    identity = require_identity(request)
    async with atomic("rental_subscribe") as session:
        result = await RentalService.subscribe(
            session,
            user_id=identity.user_id,
            plan_code=payload.plan_code,
            months=payload.months,
        )
    return SubscribeResponse(
        message="Rental activated",
        rental=_rental_as_response(result.rental),
        plan=_plan_as_response(result.plan),
        expired_rentals=result.expired_rentals,
    )


@router.get("/me/rentals", response_model=RentalListResponse)
async def list_my_rentals(request: Request) -> RentalListResponse:
    identity = require_identity(request)
    async with atomic("rental_list_for_user") as session:
        rows = await RentalService.list_rentals(session, user_id=identity.user_id)
    return RentalListResponse(
        rentals=[
            RentalWithPlanResponse(rental=_rental_as_response(row.rental), plan=_plan_as_response(row.plan))
            for row in rows
        ]
    )


@router.get("/me/entitlement", response_model=EntitlementResponse)
async def get_entitlement(request: Request) -> EntitlementResponse:
    identity = require_identity(request)
    async with atomic("rental_entitlement") as session:
        active = await RentalService.get_active_rental(session, user_id=identity.user_id)
        decision = await RentalService.check_quota(session, user_id=identity.user_id)

    return EntitlementResponse(
        plan_code=decision.plan_code,
        active_rental=(
            RentalWithPlanResponse(
                rental=_rental_as_response(active.rental),
                plan=_plan_as_response(active.plan),
            )
            if active is not None
            else None
        ),
        quota=QuotaResponse(allowed=decision.allowed, limit=decision.limit, used=decision.used),
    )
