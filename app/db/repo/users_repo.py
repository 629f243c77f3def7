from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, user_id: int) -> User | None:
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        email: str,
        role: str = "user",
    ) -> User:
        user = User(email=email, role=role, plan="free")
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    async def set_role(session: AsyncSession, *, user_id: int, role: str) -> User | None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(role=role)
            .returning(User)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(session: AsyncSession, *, limit: int) -> list[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_total(session: AsyncSession) -> int:
        result = await session.execute(select(func.count(User.id)))
        return int(result.scalar_one() or 0)
