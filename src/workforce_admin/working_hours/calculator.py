from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from typing import Any, Optional

from ..common.time_math import hours_between, overtime_hours, payable_amount, to_money


@dataclass(frozen=True)
class EntryFigures:
    total_hours: Decimal
    actual_hours: Optional[Decimal]
    overtime_hours: Decimal
    hourly_rate: Decimal
    payable_amount: Decimal


def calculate_entry(
    *,
    start_time: time,
    end_time: time,
    sign_in_time: Optional[time] = None,
    sign_out_time: Optional[time] = None,
    hourly_rate: Any = 0,
) -> EntryFigures:
    """Derive the stored figures of a working-hour entry.

    Scheduled hours come from start/end, actual hours from sign in/out when both are
    present. Pay is always on the hours actually worked.
    """

    scheduled = hours_between(start_time, end_time)
    actual = hours_between(sign_in_time, sign_out_time) if sign_in_time and sign_out_time else None
    worked = actual if actual is not None else scheduled
    rate = to_money(hourly_rate)

    return EntryFigures(
        total_hours=scheduled,
        actual_hours=actual,
        overtime_hours=overtime_hours(worked, scheduled),
        hourly_rate=rate,
        payable_amount=payable_amount(worked, rate),
    )
