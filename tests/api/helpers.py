from __future__ import annotations

from contextlib import asynccontextmanager
from types import SimpleNamespace

from app.api import access

GATEWAY_TOKEN = "gateway-secret"


def use_gateway_token(monkeypatch) -> None:
    monkeypatch.setattr(access, "get_settings", lambda: SimpleNamespace(gateway_token=GATEWAY_TOKEN))


def identity_headers(user_id: int = 7, role: str = "user") -> dict[str, str]:
    return {
        "X-Gateway-Token": GATEWAY_TOKEN,
        "X-User-Id": str(user_id),
        "X-User-Role": role,
    }


@asynccontextmanager
async def fake_atomic(operation: str):
    yield SimpleNamespace(operation=operation)
