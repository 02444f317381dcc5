from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.enums import WorkingHoursStatus
from .model import WorkingHour, WorkingHoursFilter


class WorkingHoursRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[WorkingHour]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, entry_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError

    def list(self, filters: WorkingHoursFilter) -> Sequence[WorkingHour]:
        """Entries joined with profile/client/project names, newest date first."""

        raise NotImplementedError

    def exists_for_roster(self, *, roster_id: int, profile_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def set_status_many(self, entry_ids: Iterable[int], status: WorkingHoursStatus) -> int:
        raise NotImplementedError
