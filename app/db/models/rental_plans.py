from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class RentalPlan(Base):
    __tablename__ = "rental_plans"
    __table_args__ = (
        CheckConstraint("monthly_price > 0", name="ck_rental_plans_monthly_price_positive"),
        CheckConstraint("max_video_jobs > 0", name="ck_rental_plans_max_video_jobs_positive"),
        Index("idx_rental_plans_active_price", "active", "monthly_price"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    monthly_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_video_jobs: Mapped[int] = mapped_column(Integer, nullable=False)
    perks: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
