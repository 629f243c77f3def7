from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.economy.errors import PlanNotFoundError, UserNotFoundError, ValidationError
from app.economy.rentals import service as rental_service
from app.economy.rentals.service import RentalService

UTC = timezone.utc


class _FakeSession:
    def __init__(self) -> None:
        self.flushes = 0

    async def flush(self) -> None:
        self.flushes += 1


def _plan(code: str = "pro", price: str = "2499.00") -> SimpleNamespace:
    return SimpleNamespace(
        id=3,
        code=code,
        name=code.title(),
        monthly_price=Decimal(price),
        max_video_jobs=1000,
        perks="Team-ready scaling + advanced automation",
        active=True,
    )


def _install_repos(monkeypatch, *, plan, user, expired: int = 0) -> dict[str, object]:
    calls: dict[str, object] = {}

    async def _fake_get_plan(session, code: str):
        calls["plan_code"] = code
        return plan

    async def _fake_lock_user(session, user_id: int):
        calls["locked_user_id"] = user_id
        return user

    async def _fake_expire(session, *, user_id: int) -> int:
        calls["expired_for"] = user_id
        return expired

    async def _fake_create(session, *, rental):
        rental.id = 41
        calls["rental"] = rental
        return rental

    monkeypatch.setattr(rental_service.RentalsRepo, "get_active_plan_by_code", _fake_get_plan)
    monkeypatch.setattr(rental_service.UsersRepo, "get_by_id_for_update", _fake_lock_user)
    monkeypatch.setattr(rental_service.RentalsRepo, "expire_active_for_user", _fake_expire)
    monkeypatch.setattr(rental_service.RentalsRepo, "create_rental", _fake_create)
    return calls


@pytest.mark.asyncio
async def test_subscribe_prices_months_and_switches_user_plan(monkeypatch) -> None:
    user = SimpleNamespace(id=9, plan="starter")
    calls = _install_repos(monkeypatch, plan=_plan(), user=user, expired=1)
    session = _FakeSession()
    now_utc = datetime(2026, 1, 31, 8, 0, tzinfo=UTC)

    result = await RentalService.subscribe(
        session,
        user_id=9,
        plan_code=" pro ",
        months=3,
        now_utc=now_utc,
    )

    assert calls["plan_code"] == "pro"
    assert calls["locked_user_id"] == 9
    assert calls["expired_for"] == 9
    assert result.rental.total_price == Decimal("7497.00")
    assert result.rental.status == "active"
    assert result.rental.starts_at == now_utc
    assert result.rental.ends_at == datetime(2026, 4, 30, 8, 0, tzinfo=UTC)
    assert result.expired_rentals == 1
    assert result.plan.code == "pro"
    assert user.plan == "pro"
    assert session.flushes == 1


@pytest.mark.asyncio
async def test_subscribe_rejects_unknown_plan_before_locking_user(monkeypatch) -> None:
    calls = _install_repos(monkeypatch, plan=None, user=SimpleNamespace(id=9, plan="free"))

    with pytest.raises(PlanNotFoundError):
        await RentalService.subscribe(_FakeSession(), user_id=9, plan_code="enterprise")

    assert "locked_user_id" not in calls
    assert "rental" not in calls


@pytest.mark.asyncio
async def test_subscribe_rejects_missing_user(monkeypatch) -> None:
    calls = _install_repos(monkeypatch, plan=_plan(), user=None)

    with pytest.raises(UserNotFoundError):
        await RentalService.subscribe(_FakeSession(), user_id=404, plan_code="pro")

    assert "expired_for" not in calls


@pytest.mark.asyncio
@pytest.mark.parametrize("months", [0, 25, "abc"])
async def test_subscribe_validates_months_before_any_lookup(monkeypatch, months: object) -> None:
    calls = _install_repos(monkeypatch, plan=_plan(), user=SimpleNamespace(id=9, plan="free"))

    with pytest.raises(ValidationError):
        await RentalService.subscribe(_FakeSession(), user_id=9, plan_code="pro", months=months)

    assert calls == {}


@pytest.mark.asyncio
async def test_expire_elapsed_rentals_resets_users_to_free(monkeypatch) -> None:
    users = {
        1: SimpleNamespace(id=1, plan="starter"),
        2: SimpleNamespace(id=2, plan="pro"),
    }
    expired_by_user = {1: 1, 2: 0}
    locked: list[int] = []

    async def _fake_list_ids(session, *, now_utc, limit: int) -> list[int]:
        return [1, 2]

    async def _fake_lock_user(session, user_id: int):
        locked.append(user_id)
        return users[user_id]

    async def _fake_expire_elapsed(session, *, user_id: int, now_utc) -> int:
        return expired_by_user[user_id]

    monkeypatch.setattr(rental_service.RentalsRepo, "list_user_ids_with_elapsed_active", _fake_list_ids)
    monkeypatch.setattr(rental_service.UsersRepo, "get_by_id_for_update", _fake_lock_user)
    monkeypatch.setattr(rental_service.RentalsRepo, "expire_elapsed_for_user", _fake_expire_elapsed)

    result = await RentalService.expire_elapsed_rentals(
        _FakeSession(),
        now_utc=datetime(2026, 5, 1, tzinfo=UTC),
    )

    assert locked == [1, 2]
    assert result.expired_rentals == 1
    assert result.users_reset == 1
    assert users[1].plan == "free"
    assert users[2].plan == "pro"
