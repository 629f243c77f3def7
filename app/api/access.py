from __future__ import annotations

import structlog
from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.core.logging import bind_request_identity
from app.services.gateway_auth import RequestIdentity, extract_request_identity

logger = structlog.get_logger(__name__)


def require_identity(request: Request) -> RequestIdentity:
    identity = extract_request_identity(request, expected_token=get_settings().gateway_token)
    if identity is None:
        logger.warning("gateway_auth_failed", path=request.url.path)
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHORIZED"})

    bind_request_identity(user_id=identity.user_id, role=identity.role)
    return identity


def require_admin(request: Request) -> RequestIdentity:
    identity = require_identity(request)
    if not identity.is_admin:
        logger.warning("admin_access_denied", path=request.url.path, user_id=identity.user_id)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})
    return identity
