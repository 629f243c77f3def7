from __future__ import annotations

import secrets
from dataclasses import dataclass

from fastapi import Request

GATEWAY_TOKEN_HEADER = "X-Gateway-Token"
USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
KNOWN_ROLES = frozenset({"user", "admin"})


@dataclass(frozen=True, slots=True)
class RequestIdentity:
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def is_valid_gateway_token(*, expected_token: str, received_token: str | None) -> bool:
    if not expected_token or not received_token:
        return False
    return secrets.compare_digest(expected_token, received_token)


def _parse_user_id(value: str | None) -> int | None:
    if value is None:
        return None
    candidate = value.strip()
    if not candidate.isdigit():
        return None
    user_id = int(candidate)
    return user_id if user_id > 0 else None


def _parse_role(value: str | None) -> str | None:
    if value is None:
        return None
    role = value.strip().lower()
    return role if role in KNOWN_ROLES else None


def extract_request_identity(request: Request, *, expected_token: str) -> RequestIdentity | None:
    """Read the identity the upstream auth gateway has already verified.

    Returns ``None`` unless the shared gateway token matches and both identity
    headers are well formed; the core never re-verifies credentials itself.
    """
    if not is_valid_gateway_token(
        expected_token=expected_token,
        received_token=request.headers.get(GATEWAY_TOKEN_HEADER),
    ):
        return None

    user_id = _parse_user_id(request.headers.get(USER_ID_HEADER))
    role = _parse_role(request.headers.get(USER_ROLE_HEADER))
    if user_id is None or role is None:
        return None
    return RequestIdentity(user_id=user_id, role=role)
