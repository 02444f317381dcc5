from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Permission, Role


@dataclass(frozen=True)
class RolePermission:
    role: Role
    permission: Permission


DEFAULT_ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.EMPLOYEE: frozenset(
        {
            Permission.DASHBOARD_VIEW,
            Permission.WORKING_HOURS_VIEW,
            Permission.ROSTER_VIEW,
            Permission.NOTIFICATIONS_VIEW,
        }
    ),
    Role.ACCOUNTANT: frozenset(
        {
            Permission.DASHBOARD_VIEW,
            Permission.PAYROLL_VIEW,
            Permission.PAYROLL_MANAGE,
            Permission.PAYROLL_PROCESS,
            Permission.BANK_BALANCE_VIEW,
            Permission.BANK_BALANCE_MANAGE,
            Permission.REPORTS_VIEW,
            Permission.REPORTS_GENERATE,
            Permission.WORKING_HOURS_VIEW,
            Permission.WORKING_HOURS_APPROVE,
            Permission.NOTIFICATIONS_VIEW,
        }
    ),
    Role.OPERATION: frozenset(
        {
            Permission.DASHBOARD_VIEW,
            Permission.EMPLOYEES_VIEW,
            Permission.PROJECTS_VIEW,
            Permission.PROJECTS_MANAGE,
            Permission.WORKING_HOURS_VIEW,
            Permission.WORKING_HOURS_MANAGE,
            Permission.ROSTER_VIEW,
            Permission.ROSTER_MANAGE,
            Permission.NOTIFICATIONS_VIEW,
        }
    ),
    Role.SALES_MANAGER: frozenset(
        {
            Permission.DASHBOARD_VIEW,
            Permission.CLIENTS_VIEW,
            Permission.CLIENTS_MANAGE,
            Permission.PROJECTS_VIEW,
            Permission.PROJECTS_MANAGE,
            Permission.REPORTS_VIEW,
            Permission.REPORTS_GENERATE,
            Permission.NOTIFICATIONS_VIEW,
        }
    ),
}
