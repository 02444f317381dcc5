from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for Profile.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, profile_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, profile_id: int) -> bool:
        raise NotImplementedError

    def list(
        self,
        *,
        role: Optional[Role] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Sequence[Profile]:
        raise NotImplementedError

    def has_dependents(self, profile_id: int) -> bool:
        """True when payroll or working-hour rows reference the profile."""

        raise NotImplementedError
