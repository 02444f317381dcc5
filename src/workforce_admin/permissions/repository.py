from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from ..core.enums import Permission, Role
from .model import RolePermission


class RolePermissionRepository(Protocol):
    def list_all(self) -> Sequence[RolePermission]:
        raise NotImplementedError

    def list_for_role(self, role: Role) -> Sequence[Permission]:
        raise NotImplementedError

    def is_configured(self, role: Role) -> bool:
        """True once permissions were saved for the role, even an empty set."""

        raise NotImplementedError

    def replace_for_role(self, role: Role, permissions: Iterable[Permission]) -> None:
        """Delete the role's rows, insert the given permissions and mark the role configured."""

        raise NotImplementedError

    def clear_all(self) -> None:
        raise NotImplementedError
