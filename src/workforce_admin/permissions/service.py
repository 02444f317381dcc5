from __future__ import annotations

import logging
from typing import Iterable

from ..core.enums import Permission, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import DEFAULT_ROLE_PERMISSIONS
from .repository import RolePermissionRepository

logger = logging.getLogger(__name__)


class PermissionService:
    """Role -> permission gating.

    Stored rows override the built-in defaults for a role once permissions were
    saved for it, including an empty set.
    """

    def __init__(self, role_permissions: RolePermissionRepository):
        self._role_permissions = role_permissions

    def permissions_for(self, role: Role) -> frozenset[Permission]:
        if role == Role.ADMIN:
            return frozenset(Permission)
        if self._role_permissions.is_configured(role):
            return frozenset(self._role_permissions.list_for_role(role))
        return DEFAULT_ROLE_PERMISSIONS.get(role, frozenset())

    def has_permission(self, role: Role, permission: Permission) -> bool:
        return permission in self.permissions_for(role)

    def require(self, role: Role, permission: Permission) -> None:
        if not self.has_permission(role, permission):
            raise AuthorizationError(f"Missing permission: {permission.value}")

    def matrix(self) -> dict[str, list[str]]:
        return {
            role.value: sorted(p.value for p in self.permissions_for(role))
            for role in Role
        }

    def set_role_permissions(self, *, current_role: Role, role: Role, permissions: Iterable[str]) -> frozenset[Permission]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change role permissions")
        if role == Role.ADMIN:
            raise ValidationError("Administrator permissions cannot be changed")

        parsed: set[Permission] = set()
        for raw in permissions:
            try:
                parsed.add(Permission(raw))
            except ValueError:
                raise ValidationError(f"Unknown permission: {raw}")

        self._role_permissions.replace_for_role(role, sorted(parsed, key=lambda p: p.value))
        logger.info("Permissions for role %s set to %d entries", role.value, len(parsed))
        return frozenset(parsed)

    def reset_defaults(self, *, current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change role permissions")
        self._role_permissions.clear_all()
        for role, permissions in DEFAULT_ROLE_PERMISSIONS.items():
            if role == Role.ADMIN:
                continue
            self._role_permissions.replace_for_role(role, sorted(permissions, key=lambda p: p.value))
        logger.info("Role permissions reset to defaults")
