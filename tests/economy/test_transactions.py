from __future__ import annotations

import pytest
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, InterfaceError, OperationalError

from app.economy import transactions
from app.economy.errors import PlanNotFoundError, TransientStorageError


class _FakeBegin:
    def __init__(self, log: list[str]) -> None:
        self.log = log

    async def __aenter__(self) -> object:
        self.log.append("begin")
        return object()

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.log.append("rollback" if exc_type is not None else "commit")
        return False


class _FakeSessionFactory:
    def __init__(self) -> None:
        self.log: list[str] = []

    def begin(self) -> _FakeBegin:
        return _FakeBegin(self.log)


@pytest.fixture
def session_factory(monkeypatch) -> _FakeSessionFactory:
    factory = _FakeSessionFactory()
    monkeypatch.setattr(transactions.db_session, "SessionLocal", factory)
    return factory


@pytest.mark.asyncio
async def test_atomic_commits_on_success(session_factory: _FakeSessionFactory) -> None:
    async with transactions.atomic("unit") as session:
        assert session is not None

    assert session_factory.log == ["begin", "commit"]


@pytest.mark.asyncio
async def test_atomic_propagates_domain_errors_after_rollback(session_factory: _FakeSessionFactory) -> None:
    with pytest.raises(PlanNotFoundError):
        async with transactions.atomic("unit"):
            raise PlanNotFoundError

    assert session_factory.log == ["begin", "rollback"]


@pytest.mark.asyncio
async def test_atomic_maps_connectivity_failures_to_transient_error(
    session_factory: _FakeSessionFactory,
) -> None:
    with pytest.raises(TransientStorageError) as exc_info:
        async with transactions.atomic("unit"):
            raise OperationalError("SELECT 1", {}, ConnectionResetError("connection reset"))

    assert exc_info.value.code == "E_STORAGE_UNAVAILABLE"
    assert session_factory.log == ["begin", "rollback"]


@pytest.mark.asyncio
async def test_atomic_keeps_integrity_errors(session_factory: _FakeSessionFactory) -> None:
    with pytest.raises(IntegrityError):
        async with transactions.atomic("unit"):
            raise IntegrityError("INSERT", {}, ValueError("duplicate key"))


@pytest.mark.asyncio
async def test_atomic_maps_interface_errors_to_transient_error(session_factory: _FakeSessionFactory) -> None:
    with pytest.raises(TransientStorageError):
        async with transactions.atomic("unit"):
            raise InterfaceError("SELECT 1", {}, ConnectionError("connection is closed"))


@pytest.mark.asyncio
async def test_atomic_keeps_data_errors(session_factory: _FakeSessionFactory) -> None:
    with pytest.raises(DataError):
        async with transactions.atomic("unit"):
            raise DataError("UPDATE wallet_accounts", {}, ValueError("numeric field overflow"))

    assert session_factory.log == ["begin", "rollback"]


@pytest.mark.asyncio
async def test_atomic_maps_invalidated_connections_to_transient_error(
    session_factory: _FakeSessionFactory,
) -> None:
    with pytest.raises(TransientStorageError):
        async with transactions.atomic("unit"):
            raise DBAPIError("SELECT 1", {}, ConnectionResetError("reset"), connection_invalidated=True)
