from __future__ import annotations

from typing import Iterable, Sequence

from ..core.enums import Permission, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import RolePermission
from .repository import RolePermissionRepository


class MySQLRolePermissionRepository(RolePermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[RolePermission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT role, permission FROM role_permissions ORDER BY role, permission")
            return [RolePermission(role=Role(r["role"]), permission=Permission(r["permission"])) for r in fetchall(cur)]

    def list_for_role(self, role: Role) -> Sequence[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT permission FROM role_permissions WHERE role=%s", (role.value,))
            return [Permission(r["permission"]) for r in fetchall(cur)]

    def is_configured(self, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM role_permission_overrides WHERE role=%s", (role.value,))
            return fetchone(cur) is not None

    def replace_for_role(self, role: Role, permissions: Iterable[Permission]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM role_permissions WHERE role=%s", (role.value,))
            rows = [(role.value, p.value) for p in permissions]
            if rows:
                cur.executemany("INSERT INTO role_permissions(role, permission) VALUES(%s,%s)", rows)
            cur.execute(
                "INSERT INTO role_permission_overrides(role) VALUES(%s) "
                "ON DUPLICATE KEY UPDATE updated_at=CURRENT_TIMESTAMP",
                (role.value,),
            )

    def clear_all(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM role_permissions")
            cur.execute("DELETE FROM role_permission_overrides")
