from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PayBreakdown:
    regular_hours: Decimal
    overtime_hours: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, *, total_hours: Decimal, overtime_hours: Decimal, hourly_rate: Decimal) -> PayBreakdown:
        raise NotImplementedError
