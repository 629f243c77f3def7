from __future__ import annotations

import calendar
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from app.economy.errors import ValidationError

MONEY_QUANT = Decimal("0.01")
NOTE_MAX_LENGTH = 255
PLAN_CODE_MAX_LENGTH = 50


def safe_text(value: object, max_length: int) -> str:
    if value is None:
        return ""
    return str(value).strip()[:max_length]


def normalize_email(value: object) -> str:
    return safe_text(value, 255).lower()


def to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def parse_deposit_amount(value: object, *, max_amount: Decimal) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise ValidationError("amount must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValidationError("amount must be a number") from exc

    if not amount.is_finite():
        raise ValidationError("amount must be a finite number")
    if amount <= 0:
        raise ValidationError("amount must be greater than 0")
    if amount > max_amount:
        raise ValidationError(f"amount must be <= {max_amount}")

    quantized = amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    if quantized <= 0:
        raise ValidationError("amount must be at least 0.01")
    return quantized


def parse_positive_int(value: object, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer")
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdigit()):
            raise ValidationError(f"{field_name} must be a positive integer")
        value = int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return value


def parse_months(value: object, *, max_months: int) -> int:
    months = parse_positive_int(value, "months")
    if months > max_months:
        raise ValidationError(f"months must be <= {max_months}")
    return months


def normalize_plan_code(value: object) -> str:
    plan_code = safe_text(value, PLAN_CODE_MAX_LENGTH)
    if not plan_code:
        raise ValidationError("plan_code is required")
    return plan_code


def add_months(moment: datetime, months: int) -> datetime:
    # Same clamping as PostgreSQL interval math: Jan 31 + 1 month -> Feb 28/29.
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
