from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.services.gateway_auth import (
    GATEWAY_TOKEN_HEADER,
    USER_ID_HEADER,
    USER_ROLE_HEADER,
    RequestIdentity,
    extract_request_identity,
    is_valid_gateway_token,
)


def _request(headers: dict[str, str]) -> SimpleNamespace:
    return SimpleNamespace(headers=headers)


def test_is_valid_gateway_token_requires_exact_match() -> None:
    assert is_valid_gateway_token(expected_token="secret", received_token="secret") is True
    assert is_valid_gateway_token(expected_token="secret", received_token="wrong") is False
    assert is_valid_gateway_token(expected_token="secret", received_token=None) is False
    assert is_valid_gateway_token(expected_token="", received_token="") is False


def test_extract_request_identity_reads_gateway_headers() -> None:
    request = _request(
        {
            GATEWAY_TOKEN_HEADER: "secret",
            USER_ID_HEADER: " 42 ",
            USER_ROLE_HEADER: "Admin",
        }
    )

    identity = extract_request_identity(request, expected_token="secret")

    assert identity == RequestIdentity(user_id=42, role="admin")
    assert identity is not None and identity.is_admin is True


@pytest.mark.parametrize(
    "headers",
    [
        {USER_ID_HEADER: "42", USER_ROLE_HEADER: "user"},
        {GATEWAY_TOKEN_HEADER: "wrong", USER_ID_HEADER: "42", USER_ROLE_HEADER: "user"},
        {GATEWAY_TOKEN_HEADER: "secret", USER_ROLE_HEADER: "user"},
        {GATEWAY_TOKEN_HEADER: "secret", USER_ID_HEADER: "abc", USER_ROLE_HEADER: "user"},
        {GATEWAY_TOKEN_HEADER: "secret", USER_ID_HEADER: "0", USER_ROLE_HEADER: "user"},
        {GATEWAY_TOKEN_HEADER: "secret", USER_ID_HEADER: "-3", USER_ROLE_HEADER: "user"},
        {GATEWAY_TOKEN_HEADER: "secret", USER_ID_HEADER: "42", USER_ROLE_HEADER: "superuser"},
        {GATEWAY_TOKEN_HEADER: "secret", USER_ID_HEADER: "42"},
    ],
)
def test_extract_request_identity_rejects_incomplete_or_forged_headers(headers: dict[str, str]) -> None:
    assert extract_request_identity(_request(headers), expected_token="secret") is None


def test_regular_user_is_not_admin() -> None:
    assert RequestIdentity(user_id=1, role="user").is_admin is False
