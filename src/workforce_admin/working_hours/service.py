from __future__ import annotations

import logging
from collections import Counter
from datetime import date, time
from typing import Any, Iterable, Optional

from ..common.time_math import to_hours, total
from ..common.validators import optional_text, require_decimal, require_positive_id
from ..core.enums import Role, WorkingHoursStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..payroll.repository import PayrollRepository
from ..profiles.repository import ProfileRepository
from ..projects.repository import ProjectRepository
from .calculator import calculate_entry
from .model import WorkingHour, WorkingHoursFilter
from .repository import WorkingHoursRepository

logger = logging.getLogger(__name__)


class WorkingHoursService:
    _EDITABLE = (
        "client_id",
        "project_id",
        "work_date",
        "start_time",
        "end_time",
        "sign_in_time",
        "sign_out_time",
        "hourly_rate",
        "notes",
    )

    def __init__(
        self,
        working_hours: WorkingHoursRepository,
        profiles: ProfileRepository,
        projects: ProjectRepository,
        payrolls: PayrollRepository,
    ):
        self._working_hours = working_hours
        self._profiles = profiles
        self._projects = projects
        self._payrolls = payrolls

    def get(self, entry_id: int) -> WorkingHour:
        entry = self._working_hours.get_by_id(entry_id)
        if not entry:
            raise NotFoundError("Working hour entry not found")
        return entry

    def list(self, filters: WorkingHoursFilter):
        return self._working_hours.list(filters)

    def _unlinked(self, entry_id: int, action: str) -> WorkingHour:
        entry = self.get(entry_id)
        if entry.status == WorkingHoursStatus.PAID:
            raise ConflictError(f"Paid working hours cannot be {action}")
        if self._payrolls.already_linked([entry.entry_id]):
            raise ConflictError(f"Working hours included in a payroll cannot be {action}; delete the payroll first")
        return entry

    def _check_project(self, *, client_id: int, project_id: int) -> None:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        if project.client_id != int(client_id):
            raise ValidationError("Project does not belong to the selected client")

    def log_hours(
        self,
        *,
        profile_id: int,
        client_id: int,
        project_id: int,
        work_date: date,
        start_time: time,
        end_time: time,
        sign_in_time: Optional[time] = None,
        sign_out_time: Optional[time] = None,
        hourly_rate: Any = None,
        notes: Optional[str] = None,
        roster_id: Optional[int] = None,
    ) -> int:
        profile = self._profiles.get_by_id(int(profile_id))
        if not profile:
            raise NotFoundError("Profile not found")
        if not profile.is_active:
            raise ValidationError("Profile is inactive")
        self._check_project(client_id=client_id, project_id=project_id)
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        rate = profile.hourly_rate if hourly_rate in (None, "") else require_decimal(hourly_rate, "Hourly rate")
        figures = calculate_entry(
            start_time=start_time,
            end_time=end_time,
            sign_in_time=sign_in_time,
            sign_out_time=sign_out_time,
            hourly_rate=rate,
        )

        entry_id = self._working_hours.create(
            profile_id=int(profile_id),
            client_id=int(client_id),
            project_id=int(project_id),
            roster_id=roster_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            sign_in_time=sign_in_time,
            sign_out_time=sign_out_time,
            total_hours=figures.total_hours,
            actual_hours=figures.actual_hours,
            overtime_hours=figures.overtime_hours,
            hourly_rate=figures.hourly_rate,
            payable_amount=figures.payable_amount,
            notes=optional_text(notes),
            status=WorkingHoursStatus.PENDING,
        )
        logger.debug("Logged %s hours for profile %s on %s", figures.total_hours, profile_id, work_date)
        return entry_id

    def update_entry(self, *, entry_id: int, **fields: Any) -> WorkingHour:
        entry = self._unlinked(entry_id, "edited")

        for key in fields:
            if key not in self._EDITABLE:
                raise ValidationError(f"Field cannot be changed: {key}")

        merged = {
            "client_id": entry.client_id,
            "project_id": entry.project_id,
            "work_date": entry.work_date,
            "start_time": entry.start_time,
            "end_time": entry.end_time,
            "sign_in_time": entry.sign_in_time,
            "sign_out_time": entry.sign_out_time,
            "hourly_rate": entry.hourly_rate,
            "notes": entry.notes,
        }
        merged.update(fields)
        merged["hourly_rate"] = require_decimal(merged["hourly_rate"] or 0, "Hourly rate")
        merged["notes"] = optional_text(merged["notes"])

        if "client_id" in fields or "project_id" in fields:
            merged["client_id"] = require_positive_id(merged["client_id"], "client_id")
            merged["project_id"] = require_positive_id(merged["project_id"], "project_id")
            self._check_project(client_id=merged["client_id"], project_id=merged["project_id"])
        if merged["end_time"] <= merged["start_time"]:
            raise ValidationError("End time must be after start time")

        figures = calculate_entry(
            start_time=merged["start_time"],
            end_time=merged["end_time"],
            sign_in_time=merged["sign_in_time"],
            sign_out_time=merged["sign_out_time"],
            hourly_rate=merged["hourly_rate"],
        )
        merged.update(
            total_hours=figures.total_hours,
            actual_hours=figures.actual_hours,
            overtime_hours=figures.overtime_hours,
            hourly_rate=figures.hourly_rate,
            payable_amount=figures.payable_amount,
        )
        self._working_hours.update(entry_id, merged)
        return self.get(entry_id)

    def _decide(self, entry_id: int, status: WorkingHoursStatus) -> WorkingHour:
        entry = self._unlinked(entry_id, status.value)
        if entry.status != WorkingHoursStatus.PENDING:
            raise ConflictError(f"Only pending entries can be {status.value}")
        self._working_hours.update(entry_id, {"status": status})
        return self.get(entry_id)

    def approve(self, *, entry_id: int) -> WorkingHour:
        return self._decide(entry_id, WorkingHoursStatus.APPROVED)

    def reject(self, *, entry_id: int) -> WorkingHour:
        return self._decide(entry_id, WorkingHoursStatus.REJECTED)

    def approve_many(self, *, entry_ids: Iterable[int]) -> int:
        pending: list[int] = []
        for entry_id in entry_ids:
            entry = self._working_hours.get_by_id(int(entry_id))
            if entry and entry.status == WorkingHoursStatus.PENDING:
                pending.append(entry.entry_id)
        return self._working_hours.set_status_many(pending, WorkingHoursStatus.APPROVED)

    def revert_to_pending(self, *, current_role: Role, entry_id: int) -> WorkingHour:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can reopen decided entries")
        entry = self._unlinked(entry_id, "reopened")
        if entry.status not in (WorkingHoursStatus.APPROVED, WorkingHoursStatus.REJECTED):
            raise ConflictError("Only approved or rejected entries can be reopened")
        self._working_hours.update(entry_id, {"status": WorkingHoursStatus.PENDING})
        return self.get(entry_id)

    def delete_entry(self, *, entry_id: int) -> None:
        self._unlinked(entry_id, "deleted")
        if not self._working_hours.delete(entry_id):
            raise ValidationError("Failed to delete working hour entry")

    def summary(self, filters: WorkingHoursFilter) -> dict:
        entries = list(self._working_hours.list(filters))
        statuses = Counter(e.status.value for e in entries)
        return {
            "entries": len(entries),
            "total_hours": str(to_hours(total(e.total_hours for e in entries))),
            "actual_hours": str(to_hours(total(e.worked_hours for e in entries))),
            "overtime_hours": str(to_hours(total(e.overtime_hours for e in entries))),
            "payable_amount": str(total(e.payable_amount for e in entries)),
            "by_status": {s.value: statuses.get(s.value, 0) for s in WorkingHoursStatus},
        }
