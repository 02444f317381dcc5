from __future__ import annotations

from decimal import Decimal
from typing import Any

from ...common.time_math import ZERO, net_pay, to_hours, to_money
from ...core.constants import DEFAULT_DEDUCTION_RATE, DEFAULT_OVERTIME_MULTIPLIER
from .base import PayBreakdown, PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: regular hours at the rate, overtime at rate x multiplier, flat deduction rate."""

    def __init__(
        self,
        *,
        overtime_multiplier: Any = DEFAULT_OVERTIME_MULTIPLIER,
        deduction_rate: Any = DEFAULT_DEDUCTION_RATE,
    ):
        self.overtime_multiplier = Decimal(str(overtime_multiplier))
        self.deduction_rate = Decimal(str(deduction_rate))

    def calculate(self, *, total_hours: Decimal, overtime_hours: Decimal, hourly_rate: Decimal) -> PayBreakdown:
        total_hours = to_hours(total_hours)
        overtime = min(to_hours(overtime_hours), total_hours)
        regular = max(total_hours - overtime, ZERO)
        rate = Decimal(str(hourly_rate))

        gross = to_money(regular * rate + overtime * rate * self.overtime_multiplier)
        deductions = to_money(gross * self.deduction_rate)
        return PayBreakdown(
            regular_hours=to_hours(regular),
            overtime_hours=to_hours(overtime),
            gross_pay=gross,
            deductions=deductions,
            net_pay=net_pay(gross, deductions),
        )
