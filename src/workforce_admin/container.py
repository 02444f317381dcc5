from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .banking.mysql_bank_repository import MySQLBankAccountRepository, MySQLBankTransactionRepository
from .banking.repository import BankAccountRepository, BankTransactionRepository
from .banking.service import BankingService
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.repository import ClientRepository
from .clients.service import ClientService
from .core.constants import DEFAULT_DEDUCTION_RATE, DEFAULT_OVERTIME_MULTIPLIER
from .database.connection import DatabaseConnection, DBConfig
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .payroll.bulk import BulkPayrollService
from .payroll.mysql_bulk_payroll_repository import MySQLBulkPayrollRepository
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.mysql_salary_template_repository import MySQLSalaryTemplateRepository
from .payroll.repository import BulkPayrollRepository, PayrollRepository, SalaryTemplateRepository
from .payroll.service import PayrollService
from .permissions.mysql_permission_repository import MySQLRolePermissionRepository
from .permissions.repository import RolePermissionRepository
from .permissions.service import PermissionService
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import AuthService, ProfileService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .projects.service import ProjectService
from .reports.service import ReportService
from .rosters.mysql_roster_repository import MySQLRosterRepository
from .rosters.repository import RosterRepository
from .rosters.service import RosterService
from .working_hours.mysql_working_hours_repository import MySQLWorkingHoursRepository
from .working_hours.repository import WorkingHoursRepository
from .working_hours.service import WorkingHoursService


@dataclass(frozen=True)
class Repositories:
    profiles: ProfileRepository
    role_permissions: RolePermissionRepository
    clients: ClientRepository
    projects: ProjectRepository
    working_hours: WorkingHoursRepository
    rosters: RosterRepository
    payrolls: PayrollRepository
    salary_templates: SalaryTemplateRepository
    bulk_payrolls: BulkPayrollRepository
    bank_accounts: BankAccountRepository
    bank_transactions: BankTransactionRepository
    notifications: NotificationRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    repos: Repositories

    auth_service: AuthService
    profile_service: ProfileService
    permission_service: PermissionService
    client_service: ClientService
    project_service: ProjectService
    working_hours_service: WorkingHoursService
    roster_service: RosterService
    notification_service: NotificationService
    banking_service: BankingService
    payroll_service: PayrollService
    bulk_payroll_service: BulkPayrollService
    report_service: ReportService


def assemble_container(
    repos: Repositories,
    *,
    conn: Optional[DatabaseConnection] = None,
    deduction_rate: Any = DEFAULT_DEDUCTION_RATE,
    overtime_multiplier: Any = DEFAULT_OVERTIME_MULTIPLIER,
) -> Container:
    """Wire services on top of any set of repositories (MySQL in the app, in-memory in tests)."""

    working_hours_service = WorkingHoursService(repos.working_hours, repos.profiles, repos.projects, repos.payrolls)
    notification_service = NotificationService(repos.notifications)
    banking_service = BankingService(repos.bank_accounts, repos.bank_transactions, repos.profiles)
    payroll_service = PayrollService(
        repos.payrolls,
        repos.salary_templates,
        repos.working_hours,
        repos.profiles,
        notification_service,
        banking_service,
        deduction_rate=deduction_rate,
        overtime_multiplier=overtime_multiplier,
    )

    return Container(
        conn=conn,
        repos=repos,
        auth_service=AuthService(repos.profiles),
        profile_service=ProfileService(repos.profiles),
        permission_service=PermissionService(repos.role_permissions),
        client_service=ClientService(repos.clients),
        project_service=ProjectService(repos.projects, repos.clients),
        working_hours_service=working_hours_service,
        roster_service=RosterService(
            repos.rosters,
            repos.profiles,
            repos.projects,
            repos.working_hours,
            working_hours_service,
        ),
        notification_service=notification_service,
        banking_service=banking_service,
        payroll_service=payroll_service,
        bulk_payroll_service=BulkPayrollService(repos.bulk_payrolls, payroll_service),
        report_service=ReportService(
            repos.profiles,
            repos.clients,
            repos.projects,
            repos.working_hours,
            repos.payrolls,
            banking_service,
        ),
    )


def build_container(
    *,
    db_config: dict,
    deduction_rate: Any = DEFAULT_DEDUCTION_RATE,
    overtime_multiplier: Any = DEFAULT_OVERTIME_MULTIPLIER,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        profiles=MySQLProfileRepository(conn),
        role_permissions=MySQLRolePermissionRepository(conn),
        clients=MySQLClientRepository(conn),
        projects=MySQLProjectRepository(conn),
        working_hours=MySQLWorkingHoursRepository(conn),
        rosters=MySQLRosterRepository(conn),
        payrolls=MySQLPayrollRepository(conn),
        salary_templates=MySQLSalaryTemplateRepository(conn),
        bulk_payrolls=MySQLBulkPayrollRepository(conn),
        bank_accounts=MySQLBankAccountRepository(conn),
        bank_transactions=MySQLBankTransactionRepository(conn),
        notifications=MySQLNotificationRepository(conn),
    )
    return assemble_container(
        repos,
        conn=conn,
        deduction_rate=deduction_rate,
        overtime_multiplier=overtime_multiplier,
    )
