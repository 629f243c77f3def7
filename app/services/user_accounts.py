from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User
from app.db.repo.users_repo import UsersRepo
from app.economy.errors import UserNotFoundError, ValidationError
from app.economy.inputs import normalize_email

logger = structlog.get_logger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USER_ROLES = ("user", "admin")


@dataclass(frozen=True, slots=True)
class UserSnapshot:
    user_id: int
    email: str
    role: str
    plan: str
    created_at: datetime


def _user_snapshot(user: User) -> UserSnapshot:
    return UserSnapshot(
        user_id=user.id,
        email=user.email,
        role=user.role,
        plan=user.plan,
        created_at=user.created_at,
    )


class UserAccountsService:
    @staticmethod
    async def ensure_user(
        session: AsyncSession,
        *,
        email: object,
        role: str = "user",
    ) -> UserSnapshot:
        normalized = normalize_email(email)
        if not normalized or EMAIL_RE.match(normalized) is None:
            raise ValidationError("invalid email format")
        if role not in USER_ROLES:
            raise ValidationError("role must be admin or user")

        user = await UsersRepo.get_by_email(session, normalized)
        if user is None:
            user = await UsersRepo.create(session, email=normalized, role=role)
            await session.refresh(user)
            logger.info("user_created", user_id=user.id, role=role)
        return _user_snapshot(user)

    @staticmethod
    async def list_users(session: AsyncSession, *, limit: int = 500) -> list[UserSnapshot]:
        users = await UsersRepo.list_users(session, limit=max(1, min(500, int(limit))))
        return [_user_snapshot(user) for user in users]

    @staticmethod
    async def set_role(session: AsyncSession, *, user_id: int, role: object) -> UserSnapshot:
        resolved_role = str(role or "").strip()[:20]
        if resolved_role not in USER_ROLES:
            raise ValidationError("role must be admin or user")

        user = await UsersRepo.set_role(session, user_id=user_id, role=resolved_role)
        if user is None:
            raise UserNotFoundError
        logger.info("user_role_changed", user_id=user_id, role=resolved_role)
        return _user_snapshot(user)
