from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Iterable, Optional

from ..common.datetime_utils import iter_days, week_bounds
from ..common.time_math import hours_between, total
from ..common.validators import optional_text, require_decimal
from ..core.enums import RosterStatus, WorkingHoursStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..profiles.repository import ProfileRepository
from ..projects.repository import ProjectRepository
from ..working_hours.model import WorkingHoursFilter
from ..working_hours.repository import WorkingHoursRepository
from ..working_hours.service import WorkingHoursService
from .model import Roster
from .repository import RosterRepository

logger = logging.getLogger(__name__)


def _expected_count(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Expected profiles must be a whole number")
    if count < 1:
        raise ValidationError("Expected profiles must be at least 1")
    return count


class RosterService:
    _EDITABLE = (
        "name",
        "work_date",
        "end_date",
        "start_time",
        "end_time",
        "notes",
        "expected_profiles",
        "per_hour_rate",
    )

    def __init__(
        self,
        rosters: RosterRepository,
        profiles: ProfileRepository,
        projects: ProjectRepository,
        working_hours: WorkingHoursRepository,
        working_hours_service: WorkingHoursService,
    ):
        self._rosters = rosters
        self._profiles = profiles
        self._projects = projects
        self._working_hours = working_hours
        self._working_hours_service = working_hours_service

    def get(self, roster_id: int) -> Roster:
        roster = self._rosters.get_by_id(roster_id)
        if not roster:
            raise NotFoundError("Roster not found")
        return roster

    def list_range(self, *, start: date, end: date, **filters: Any):
        if end < start:
            raise ValidationError("End date must be on or after start date")
        return self._rosters.list_range(start=start, end=end, **filters)

    def weekly(self, *, day: date, **filters: Any):
        start, end = week_bounds(day)
        return self._rosters.list_range(start=start, end=end, **filters)

    @staticmethod
    def _check_window(work_date: date, end_date: Optional[date], start_time: time, end_time: time) -> None:
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")
        if end_date is not None and end_date < work_date:
            raise ValidationError("End date must be on or after the roster date")

    def _check_profiles(self, profile_ids: Iterable[int]) -> list[int]:
        ids: list[int] = []
        for raw in profile_ids:
            profile_id = int(raw)
            profile = self._profiles.get_by_id(profile_id)
            if not profile:
                raise NotFoundError(f"Profile not found: {profile_id}")
            if not profile.is_active:
                raise ValidationError(f"Profile is inactive: {profile.full_name}")
            if profile_id not in ids:
                ids.append(profile_id)
        return ids

    def create_roster(
        self,
        *,
        created_by: int,
        client_id: int,
        project_id: int,
        work_date: date,
        start_time: time,
        end_time: time,
        profile_ids: Iterable[int] = (),
        end_date: Optional[date] = None,
        name: Optional[str] = None,
        notes: Optional[str] = None,
        expected_profiles: int = 1,
        per_hour_rate: Any = None,
    ) -> int:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        if project.client_id != int(client_id):
            raise ValidationError("Project does not belong to the selected client")
        self._check_window(work_date, end_date, start_time, end_time)
        expected_profiles = _expected_count(expected_profiles)

        assigned = self._check_profiles(profile_ids)
        rate = None if per_hour_rate in (None, "") else require_decimal(per_hour_rate, "Per hour rate")

        roster_id = self._rosters.create(
            name=optional_text(name),
            profile_id=int(created_by),
            client_id=int(client_id),
            project_id=int(project_id),
            work_date=work_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            total_hours=hours_between(start_time, end_time),
            notes=optional_text(notes),
            status=RosterStatus.PENDING,
            expected_profiles=expected_profiles,
            per_hour_rate=rate,
            is_locked=False,
        )
        if assigned:
            self._rosters.add_profiles(roster_id, assigned)
        logger.info("Roster %s created with %s profile(s)", roster_id, len(assigned))
        return roster_id

    def _editable(self, roster_id: int) -> Roster:
        roster = self.get(roster_id)
        if roster.is_locked:
            raise ConflictError("Roster is locked")
        return roster

    def update_roster(self, *, roster_id: int, **fields: Any) -> Roster:
        roster = self._editable(roster_id)
        for key in fields:
            if key not in self._EDITABLE:
                raise ValidationError(f"Field cannot be changed: {key}")

        work_date = fields.get("work_date", roster.work_date)
        end_date = fields.get("end_date", roster.end_date)
        start_time = fields.get("start_time", roster.start_time)
        end_time = fields.get("end_time", roster.end_time)
        self._check_window(work_date, end_date, start_time, end_time)

        changes = dict(fields)
        if "name" in changes:
            changes["name"] = optional_text(changes["name"])
        if "notes" in changes:
            changes["notes"] = optional_text(changes["notes"])
        if "expected_profiles" in changes:
            changes["expected_profiles"] = _expected_count(changes["expected_profiles"])
        if "per_hour_rate" in changes and changes["per_hour_rate"] not in (None, ""):
            changes["per_hour_rate"] = require_decimal(changes["per_hour_rate"], "Per hour rate")
        elif "per_hour_rate" in changes:
            changes["per_hour_rate"] = None
        if "start_time" in changes or "end_time" in changes:
            changes["total_hours"] = hours_between(start_time, end_time)

        self._rosters.update(roster_id, changes)
        return self.get(roster_id)

    def assign_profiles(self, *, roster_id: int, profile_ids: Iterable[int]) -> Roster:
        roster = self._editable(roster_id)
        if roster.status == RosterStatus.CANCELLED:
            raise ConflictError("Cannot assign profiles to a cancelled roster")
        ids = self._check_profiles(profile_ids)
        self._rosters.add_profiles(roster_id, [pid for pid in ids if pid not in roster.profile_ids])
        return self.get(roster_id)

    def unassign_profile(self, *, roster_id: int, profile_id: int) -> Roster:
        self._editable(roster_id)
        if not self._rosters.remove_profile(roster_id, int(profile_id)):
            raise NotFoundError("Profile is not assigned to this roster")
        return self.get(roster_id)

    def confirm(self, *, roster_id: int) -> Roster:
        roster = self.get(roster_id)
        if roster.status != RosterStatus.PENDING:
            raise ConflictError("Only pending rosters can be confirmed")
        if not roster.profile_ids:
            raise ValidationError("Assign at least one profile before confirming")
        self._rosters.update(roster_id, {"status": RosterStatus.CONFIRMED})
        return self.get(roster_id)

    def cancel(self, *, roster_id: int) -> Roster:
        roster = self._editable(roster_id)
        if roster.status == RosterStatus.CANCELLED:
            raise ConflictError("Roster is already cancelled")
        self._rosters.update(roster_id, {"status": RosterStatus.CANCELLED})
        return self.get(roster_id)

    def set_locked(self, *, roster_id: int, locked: bool = True) -> Roster:
        self.get(roster_id)
        self._rosters.update(roster_id, {"is_locked": bool(locked)})
        return self.get(roster_id)

    def delete_roster(self, *, roster_id: int) -> None:
        self._editable(roster_id)
        if not self._rosters.delete(roster_id):
            raise ValidationError("Failed to delete roster")

    def generate_working_hours(self, *, roster_id: int) -> int:
        """Create pending entries for every assigned profile and rostered day.

        Days that already have an entry for the profile are skipped.
        Returns how many entries were created.
        """

        roster = self.get(roster_id)
        if roster.status == RosterStatus.CANCELLED:
            raise ConflictError("Cannot generate hours for a cancelled roster")
        if not roster.profile_ids:
            raise ValidationError("Roster has no assigned profiles")

        # Checked up front so a bad assignment never leaves a partial run behind.
        unavailable = []
        for profile_id in roster.profile_ids:
            profile = self._profiles.get_by_id(profile_id)
            if not profile or not profile.is_active:
                unavailable.append(profile.full_name if profile else str(profile_id))
        if unavailable:
            raise ValidationError(f"Inactive or missing profiles assigned: {', '.join(unavailable)}")

        created = 0
        for day in iter_days(roster.work_date, roster.last_date):
            for profile_id in roster.profile_ids:
                if self._working_hours.exists_for_roster(roster_id=roster_id, profile_id=profile_id, work_date=day):
                    continue
                self._working_hours_service.log_hours(
                    profile_id=profile_id,
                    client_id=roster.client_id,
                    project_id=roster.project_id,
                    work_date=day,
                    start_time=roster.start_time,
                    end_time=roster.end_time,
                    hourly_rate=roster.per_hour_rate,
                    notes=roster.name,
                    roster_id=roster_id,
                )
                created += 1
        logger.info("Generated %s working hour entries from roster %s", created, roster_id)
        return created

    def day_report(self, *, day: date) -> list[dict]:
        """Per-roster staffing and cost figures for one day."""

        report: list[dict] = []
        for roster in self._rosters.list_range(start=day, end=day):
            entries = list(
                self._working_hours.list(WorkingHoursFilter(roster_id=roster.roster_id, start_date=day, end_date=day))
            )
            report.append(
                {
                    "roster_id": roster.roster_id,
                    "name": roster.name,
                    "project_name": roster.project_name,
                    "client_name": roster.client_name,
                    "status": roster.status.value,
                    "assigned_profiles": len(roster.profile_ids),
                    "expected_profiles": roster.expected_profiles,
                    "pending_entries": sum(1 for e in entries if e.status == WorkingHoursStatus.PENDING),
                    "total_hours": str(total(e.worked_hours for e in entries)),
                    "total_payable": str(total(e.payable_amount for e in entries)),
                }
            )
        return report
