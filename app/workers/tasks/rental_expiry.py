from __future__ import annotations

from datetime import datetime, timezone
from time import perf_counter

import structlog

from app.core.config import get_settings
from app.economy.rentals.service import EXPIRY_SWEEP_BATCH_SIZE, RentalService
from app.economy.transactions import atomic
from app.workers.asyncio_runner import run_async_job
from app.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)

MAX_SWEEP_BATCHES = 20


def _clamp_batch_size(value: int) -> int:
    return max(1, min(5000, int(value)))


async def run_rental_expiry_sweep_async(
    *,
    now_utc: datetime | None = None,
    batch_size: int = EXPIRY_SWEEP_BATCH_SIZE,
    max_batches: int = MAX_SWEEP_BATCHES,
) -> dict[str, int]:
    now = now_utc or datetime.now(timezone.utc)
    resolved_batch_size = _clamp_batch_size(batch_size)
    started_at = perf_counter()

    expired_total = 0
    users_reset_total = 0
    batches = 0
    for _ in range(max(1, max_batches)):
        async with atomic("rental_expiry_sweep") as session:
            result = await RentalService.expire_elapsed_rentals(
                session,
                now_utc=now,
                batch_size=resolved_batch_size,
            )
        batches += 1
        expired_total += result.expired_rentals
        users_reset_total += result.users_reset
        if result.expired_rentals < resolved_batch_size:
            break

    summary = {
        "expired_rentals": expired_total,
        "users_reset": users_reset_total,
        "batches": batches,
        "duration_ms": int((perf_counter() - started_at) * 1000),
    }
    logger.info("rental_expiry_sweep_completed", **summary)
    return summary


@celery_app.task(name="app.workers.tasks.rental_expiry.run_rental_expiry_sweep")
def run_rental_expiry_sweep() -> dict[str, int]:
    return run_async_job(run_rental_expiry_sweep_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "rental-expiry-sweep": {
            "task": "app.workers.tasks.rental_expiry.run_rental_expiry_sweep",
            "schedule": float(get_settings().rental_expiry_sweep_interval_sec),
            "options": {"queue": "q_normal"},
        },
    }
)
