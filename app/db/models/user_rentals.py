from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class UserRental(Base):
    __tablename__ = "user_rentals"
    __table_args__ = (
        CheckConstraint("months >= 1 AND months <= 24", name="ck_user_rentals_months_range"),
        CheckConstraint("total_price > 0", name="ck_user_rentals_total_price_positive"),
        CheckConstraint("status IN ('active','expired')", name="ck_user_rentals_status"),
        CheckConstraint("ends_at > starts_at", name="ck_user_rentals_period"),
        Index("idx_user_rentals_user_created", "user_id", "created_at"),
        Index("idx_user_rentals_status_ends", "status", "ends_at"),
        Index(
            "uq_user_rentals_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    plan_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("rental_plans.id"), nullable=False)
    months: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default=text("'active'"))
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
