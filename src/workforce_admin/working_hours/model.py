from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import format_time
from ..core.enums import WorkingHoursStatus


@dataclass(frozen=True)
class WorkingHour:
    """Domain entity: scheduled vs. actual time worked by a profile on a project."""

    entry_id: int
    profile_id: int
    client_id: int
    project_id: int
    work_date: date
    start_time: time
    end_time: time
    total_hours: Decimal
    status: WorkingHoursStatus
    sign_in_time: Optional[time] = None
    sign_out_time: Optional[time] = None
    actual_hours: Optional[Decimal] = None
    overtime_hours: Decimal = Decimal("0")
    hourly_rate: Decimal = Decimal("0")
    payable_amount: Decimal = Decimal("0")
    roster_id: Optional[int] = None
    notes: Optional[str] = None
    profile_name: Optional[str] = None
    client_name: Optional[str] = None
    project_name: Optional[str] = None

    @property
    def worked_hours(self) -> Decimal:
        """Actual hours when signed in/out, otherwise the scheduled hours."""
        return self.actual_hours if self.actual_hours is not None else self.total_hours

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "profile_id": self.profile_id,
            "profile_name": self.profile_name,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "roster_id": self.roster_id,
            "date": self.work_date.isoformat(),
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "sign_in_time": format_time(self.sign_in_time),
            "sign_out_time": format_time(self.sign_out_time),
            "total_hours": str(self.total_hours),
            "actual_hours": str(self.actual_hours) if self.actual_hours is not None else None,
            "overtime_hours": str(self.overtime_hours),
            "hourly_rate": str(self.hourly_rate),
            "payable_amount": str(self.payable_amount),
            "status": self.status.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class WorkingHoursFilter:
    profile_id: Optional[int] = None
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    roster_id: Optional[int] = None
    status: Optional[WorkingHoursStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
