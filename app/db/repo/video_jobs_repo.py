from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.video_jobs import VideoJob


class VideoJobsRepo:
    @staticmethod
    async def count_for_user(session: AsyncSession, user_id: int) -> int:
        stmt = select(func.count(VideoJob.id)).where(VideoJob.user_id == user_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_total(session: AsyncSession) -> int:
        result = await session.execute(select(func.count(VideoJob.id)))
        return int(result.scalar_one() or 0)
