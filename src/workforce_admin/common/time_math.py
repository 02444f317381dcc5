"""Time-interval and money arithmetic shared by working hours, rosters and payroll."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")


def _as_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value: Any) -> Decimal:
    return _as_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_hours(value: Any) -> Decimal:
    return _as_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def hours_between(start: Optional[time], end: Optional[time]) -> Decimal:
    """Hours from start to end on the same day, never negative."""
    if start is None or end is None:
        return to_hours(ZERO)
    anchor = date(2000, 1, 1)
    seconds = (datetime.combine(anchor, end) - datetime.combine(anchor, start)).total_seconds()
    hours = Decimal(int(seconds)) / Decimal(3600)
    return to_hours(max(hours, ZERO))


def overtime_hours(actual: Any, scheduled: Any) -> Decimal:
    return to_hours(max(_as_decimal(actual) - _as_decimal(scheduled), ZERO))


def payable_amount(hours: Any, rate: Any) -> Decimal:
    return to_money(_as_decimal(hours) * _as_decimal(rate))


def net_pay(gross: Any, deductions: Any) -> Decimal:
    return to_money(_as_decimal(gross) - _as_decimal(deductions))


def total(values: Iterable[Any]) -> Decimal:
    return to_money(sum((_as_decimal(v) for v in values), ZERO))


def average(values: Iterable[Any]) -> Decimal:
    items = [_as_decimal(v) for v in values]
    if not items:
        return to_money(ZERO)
    return to_money(sum(items, ZERO) / len(items))
