from __future__ import annotations

from datetime import datetime, timezone

from app.economy.inputs import add_months

UTC = timezone.utc


def test_add_months_keeps_day_of_month() -> None:
    start = datetime(2026, 3, 15, 10, 30, tzinfo=UTC)
    assert add_months(start, 3) == datetime(2026, 6, 15, 10, 30, tzinfo=UTC)


def test_add_months_clamps_to_month_end() -> None:
    assert add_months(datetime(2026, 1, 31, tzinfo=UTC), 1) == datetime(2026, 2, 28, tzinfo=UTC)
    assert add_months(datetime(2028, 1, 31, tzinfo=UTC), 1) == datetime(2028, 2, 29, tzinfo=UTC)


def test_add_months_rolls_over_year() -> None:
    assert add_months(datetime(2026, 11, 30, tzinfo=UTC), 24) == datetime(2028, 11, 30, tzinfo=UTC)
    assert add_months(datetime(2026, 12, 1, tzinfo=UTC), 1) == datetime(2027, 1, 1, tzinfo=UTC)
