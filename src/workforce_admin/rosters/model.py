from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import format_time
from ..core.enums import RosterStatus


@dataclass(frozen=True)
class Roster:
    """Planned staffing for a project over a date range and daily time window."""

    roster_id: int
    profile_id: int
    client_id: int
    project_id: int
    work_date: date
    start_time: time
    end_time: time
    total_hours: Decimal
    status: RosterStatus = RosterStatus.PENDING
    end_date: Optional[date] = None
    name: Optional[str] = None
    notes: Optional[str] = None
    expected_profiles: int = 1
    per_hour_rate: Optional[Decimal] = None
    is_locked: bool = False
    profile_ids: tuple[int, ...] = field(default_factory=tuple)
    project_name: Optional[str] = None
    client_name: Optional[str] = None

    @property
    def last_date(self) -> date:
        return self.end_date or self.work_date

    def covers(self, day: date) -> bool:
        return self.work_date <= day <= self.last_date

    def to_dict(self) -> dict:
        return {
            "roster_id": self.roster_id,
            "name": self.name,
            "profile_id": self.profile_id,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "date": self.work_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "total_hours": str(self.total_hours),
            "status": self.status.value,
            "notes": self.notes,
            "expected_profiles": self.expected_profiles,
            "per_hour_rate": str(self.per_hour_rate) if self.per_hour_rate is not None else None,
            "is_locked": self.is_locked,
            "profile_ids": list(self.profile_ids),
        }
