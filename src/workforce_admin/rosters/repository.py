from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.enums import RosterStatus
from .model import Roster


class RosterRepository(Protocol):
    def get_by_id(self, roster_id: int) -> Optional[Roster]:
        """Roster with its assigned profile ids."""

        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, roster_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, roster_id: int) -> bool:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        status: Optional[RosterStatus] = None,
        project_id: Optional[int] = None,
        profile_id: Optional[int] = None,
    ) -> Sequence[Roster]:
        """Rosters whose [date, end_date] overlaps [start, end]."""

        raise NotImplementedError

    def add_profiles(self, roster_id: int, profile_ids: Iterable[int]) -> int:
        """Insert missing assignments, returns how many were added."""

        raise NotImplementedError

    def remove_profile(self, roster_id: int, profile_id: int) -> bool:
        raise NotImplementedError
