from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from fastapi.testclient import TestClient

from app.api.routes import rentals as rental_routes
from app.economy.errors import PlanNotFoundError, ValidationError
from app.economy.rentals.types import (
    PlanSnapshot,
    QuotaDecision,
    RentalSnapshot,
    RentalWithPlan,
    SubscribeResult,
)
from app.main import app
from tests.api.helpers import fake_atomic, identity_headers, use_gateway_token

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _plan(code: str = "pro", price: str = "2499.00", quota: int = 1000) -> PlanSnapshot:
    return PlanSnapshot(
        plan_id=3,
        code=code,
        name=code.title(),
        monthly_price=Decimal(price),
        max_video_jobs=quota,
        perks=None,
        active=True,
    )


def _rental(months: int = 3, total: str = "7497.00") -> RentalSnapshot:
    return RentalSnapshot(
        rental_id=41,
        user_id=7,
        plan_id=3,
        months=months,
        total_price=Decimal(total),
        status="active",
        starts_at=NOW,
        ends_at=datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc),
        created_at=NOW,
    )


def test_list_plans_requires_identity(monkeypatch) -> None:
    use_gateway_token(monkeypatch)

    client = TestClient(app)
    response = client.get("/rent/plans")

    assert response.status_code == 401


def test_list_plans_returns_catalog(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)

    async def _fake_list(session) -> list[PlanSnapshot]:
        return [_plan("starter", "299.00", 30), _plan("pro")]

    monkeypatch.setattr(rental_routes.RentalService, "list_active_plans", _fake_list)

    client = TestClient(app)
    response = client.get("/rent/plans", headers=identity_headers())

    assert response.status_code == 200
    assert [plan["code"] for plan in response.json()["plans"]] == ["starter", "pro"]


def test_subscribe_returns_new_rental(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)
    captured: dict[str, object] = {}

    async def _fake_subscribe(session, *, user_id: int, plan_code: str, months: int) -> SubscribeResult:
        captured.update({"user_id": user_id, "plan_code": plan_code, "months": months})
        return SubscribeResult(rental=_rental(), plan=_plan(), expired_rentals=1)

    monkeypatch.setattr(rental_routes.RentalService, "subscribe", _fake_subscribe)

    client = TestClient(app)
    response = client.post(
        "/rent/subscribe",
        json={"plan_code": "pro", "months": 3},
        headers=identity_headers(user_id=7),
    )

    assert response.status_code == 200
    payload = response.json()
    assert Decimal(payload["rental"]["total_price"]) == Decimal("7497.00")
    assert payload["plan"]["code"] == "pro"
    assert payload["expired_rentals"] == 1
    assert captured == {"user_id": 7, "plan_code": "pro", "months": 3}


def test_subscribe_defaults_to_one_month(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)
    captured: dict[str, object] = {}

    async def _fake_subscribe(session, *, user_id: int, plan_code: str, months: int) -> SubscribeResult:
        captured["months"] = months
        return SubscribeResult(rental=_rental(months=1, total="2499.00"), plan=_plan(), expired_rentals=0)

    monkeypatch.setattr(rental_routes.RentalService, "subscribe", _fake_subscribe)

    client = TestClient(app)
    response = client.post("/rent/subscribe", json={"plan_code": "pro"}, headers=identity_headers())

    assert response.status_code == 200
    assert captured == {"months": 1}


def test_subscribe_maps_unknown_plan_to_404(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)

    async def _fake_subscribe(session, **kwargs) -> SubscribeResult:
        raise PlanNotFoundError

    monkeypatch.setattr(rental_routes.RentalService, "subscribe", _fake_subscribe)

    client = TestClient(app)
    response = client.post("/rent/subscribe", json={"plan_code": "enterprise"}, headers=identity_headers())

    assert response.status_code == 404
    assert response.json() == {"detail": {"code": "E_NOT_FOUND", "message": "Plan not found"}}


def test_subscribe_maps_invalid_months_to_400(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)

    async def _fake_subscribe(session, **kwargs) -> SubscribeResult:
        raise ValidationError("months must be <= 24")

    monkeypatch.setattr(rental_routes.RentalService, "subscribe", _fake_subscribe)

    client = TestClient(app)
    response = client.post(
        "/rent/subscribe",
        json={"plan_code": "pro", "months": 36},
        headers=identity_headers(),
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "E_VALIDATION"


def test_entitlement_reports_active_rental_and_quota(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)

    async def _fake_active(session, *, user_id: int) -> RentalWithPlan:
        return RentalWithPlan(rental=_rental(), plan=_plan("starter", "299.00", 30))

    async def _fake_quota(session, *, user_id: int) -> QuotaDecision:
        return QuotaDecision(allowed=False, plan_code="starter", limit=30, used=30)

    monkeypatch.setattr(rental_routes.RentalService, "get_active_rental", _fake_active)
    monkeypatch.setattr(rental_routes.RentalService, "check_quota", _fake_quota)

    client = TestClient(app)
    response = client.get("/me/entitlement", headers=identity_headers())

    assert response.status_code == 200
    payload = response.json()
    assert payload["plan_code"] == "starter"
    assert payload["active_rental"]["plan"]["max_video_jobs"] == 30
    assert payload["quota"] == {"allowed": False, "limit": 30, "used": 30}


def test_entitlement_without_rental_is_unmetered(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)

    async def _fake_active(session, *, user_id: int) -> None:
        return None

    async def _fake_quota(session, *, user_id: int) -> QuotaDecision:
        return QuotaDecision(allowed=True, plan_code=None, limit=None, used=None)

    monkeypatch.setattr(rental_routes.RentalService, "get_active_rental", _fake_active)
    monkeypatch.setattr(rental_routes.RentalService, "check_quota", _fake_quota)

    client = TestClient(app)
    response = client.get("/me/entitlement", headers=identity_headers())

    assert response.status_code == 200
    assert response.json() == {
        "plan_code": None,
        "active_rental": None,
        "quota": {"allowed": True, "limit": None, "used": None},
    }


def test_my_rentals_lists_history(monkeypatch) -> None:
    use_gateway_token(monkeypatch)
    monkeypatch.setattr(rental_routes, "atomic", fake_atomic)

    async def _fake_list(session, *, user_id: int) -> list[RentalWithPlan]:
        return [RentalWithPlan(rental=_rental(), plan=_plan())]

    monkeypatch.setattr(rental_routes.RentalService, "list_rentals", _fake_list)

    client = TestClient(app)
    response = client.get("/me/rentals", headers=identity_headers())

    assert response.status_code == 200
    rentals = response.json()["rentals"]
    assert len(rentals) == 1
    assert rentals[0]["rental"]["rental_id"] == 41
    assert rentals[0]["plan"]["code"] == "pro"
