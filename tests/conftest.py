from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Iterable, Optional

import pytest
from werkzeug.security import generate_password_hash

from workforce_admin.banking.model import BankAccount, BankTransaction, TransactionFilter
from workforce_admin.clients.model import Client
from workforce_admin.container import Repositories, assemble_container
from workforce_admin.core.enums import EmploymentType, Role, WorkingHoursStatus
from workforce_admin.notifications.model import Notification
from workforce_admin.payroll.model import BulkPayroll, BulkPayrollItem, Payroll, SalaryTemplate
from workforce_admin.permissions.model import RolePermission
from workforce_admin.profiles.model import Profile
from workforce_admin.projects.model import Project
from workforce_admin.rosters.model import Roster
from workforce_admin.working_hours.model import WorkingHour, WorkingHoursFilter


class InMemoryTable:
    """Dict-backed rows of one frozen dataclass; unknown create/update keys are ignored."""

    model: Any = None
    id_field: str = ""

    def __init__(self):
        self.rows: dict[int, Any] = {}
        self._next_id = 0
        self.referenced_by: list = []

    def _names(self) -> set[str]:
        return {f.name for f in dataclasses.fields(self.model)}

    def _enrich(self, row):
        return row

    def get_by_id(self, row_id: int):
        row = self.rows.get(int(row_id))
        return self._enrich(row) if row else None

    def create(self, **fields: Any) -> int:
        self._next_id += 1
        names = self._names()
        values = {k: v for k, v in fields.items() if k in names}
        values[self.id_field] = self._next_id
        self.rows[self._next_id] = self.model(**values)
        return self._next_id

    def update(self, row_id: int, changes: dict[str, Any]) -> bool:
        row = self.rows.get(int(row_id))
        if row is None:
            return False
        names = self._names()
        self.rows[int(row_id)] = dataclasses.replace(row, **{k: v for k, v in changes.items() if k in names})
        return True

    def delete(self, row_id: int) -> bool:
        return self.rows.pop(int(row_id), None) is not None

    def all(self) -> list:
        return [self._enrich(r) for r in self.rows.values()]

    def count_references(self, row_id: int) -> int:
        """Rows of the (table, field) pairs in `referenced_by` that point at row_id."""

        return sum(
            1
            for table, field in self.referenced_by
            for row in table.rows.values()
            if getattr(row, field) == int(row_id)
        )


class InMemoryProfiles(InMemoryTable):
    model = Profile
    id_field = "profile_id"

    def __init__(self):
        super().__init__()
        self.rosters: Optional[InMemoryRosters] = None

    def get_by_email(self, email: str) -> Optional[Profile]:
        for p in self.rows.values():
            if p.email == email:
                return p
        return None

    def delete_by_id(self, profile_id: int) -> bool:
        return self.delete(profile_id)

    def list(self, *, role=None, is_active=None, search=None):
        out = []
        for p in self.rows.values():
            if role is not None and p.role != role:
                continue
            if is_active is not None and bool(p.is_active) != is_active:
                continue
            if search and search.lower() not in (p.full_name + p.email).lower():
                continue
            out.append(p)
        return sorted(out, key=lambda p: p.full_name)

    def has_dependents(self, profile_id: int) -> bool:
        assigned = self.rosters is not None and any(
            int(profile_id) in ids for ids in self.rosters.assignments.values()
        )
        return assigned or self.count_references(profile_id) > 0


class InMemoryRolePermissions:
    def __init__(self):
        self.by_role: dict[Role, list] = {}

    def list_all(self):
        return [RolePermission(role=r, permission=p) for r, perms in self.by_role.items() for p in perms]

    def list_for_role(self, role: Role):
        return list(self.by_role.get(role, []))

    def is_configured(self, role: Role) -> bool:
        return role in self.by_role

    def replace_for_role(self, role: Role, permissions: Iterable) -> None:
        self.by_role[role] = list(permissions)

    def clear_all(self) -> None:
        self.by_role.clear()


class InMemoryClients(InMemoryTable):
    model = Client
    id_field = "client_id"

    def list(self, *, status=None, search=None):
        out = [c for c in self.rows.values() if status is None or c.status == status]
        if search:
            out = [c for c in out if search.lower() in (c.name + c.company + c.email).lower()]
        return out


class InMemoryProjects(InMemoryTable):
    model = Project
    id_field = "project_id"

    def __init__(self, clients: InMemoryClients):
        super().__init__()
        self.clients = clients

    def _enrich(self, row):
        client = self.clients.rows.get(row.client_id)
        return dataclasses.replace(row, client_name=client.name if client else None)

    def list(self, *, client_id=None, status=None):
        return [
            p
            for p in self.all()
            if (client_id is None or p.client_id == int(client_id)) and (status is None or p.status == status)
        ]


class InMemoryWorkingHours(InMemoryTable):
    model = WorkingHour
    id_field = "entry_id"

    def __init__(self, profiles: InMemoryProfiles, projects: InMemoryProjects):
        super().__init__()
        self.profiles = profiles
        self.projects = projects

    def _enrich(self, row):
        profile = self.profiles.rows.get(row.profile_id)
        project = self.projects.get_by_id(row.project_id)
        return dataclasses.replace(
            row,
            profile_name=profile.full_name if profile else None,
            project_name=project.name if project else None,
            client_name=project.client_name if project else None,
        )

    def list(self, filters: WorkingHoursFilter):
        out = []
        for e in self.all():
            if filters.profile_id is not None and e.profile_id != filters.profile_id:
                continue
            if filters.client_id is not None and e.client_id != filters.client_id:
                continue
            if filters.project_id is not None and e.project_id != filters.project_id:
                continue
            if filters.roster_id is not None and e.roster_id != filters.roster_id:
                continue
            if filters.status is not None and e.status != filters.status:
                continue
            if filters.start_date and e.work_date < filters.start_date:
                continue
            if filters.end_date and e.work_date > filters.end_date:
                continue
            out.append(e)
        return sorted(out, key=lambda e: (e.work_date, e.start_time), reverse=True)

    def exists_for_roster(self, *, roster_id: int, profile_id: int, work_date: date) -> bool:
        return any(
            e.roster_id == roster_id and e.profile_id == profile_id and e.work_date == work_date
            for e in self.rows.values()
        )

    def set_status_many(self, entry_ids: Iterable[int], status: WorkingHoursStatus) -> int:
        count = 0
        for entry_id in entry_ids:
            if self.update(entry_id, {"status": status}):
                count += 1
        return count


class InMemoryRosters(InMemoryTable):
    model = Roster
    id_field = "roster_id"

    def __init__(self):
        super().__init__()
        self.assignments: dict[int, list[int]] = {}

    def _enrich(self, row):
        return dataclasses.replace(row, profile_ids=tuple(self.assignments.get(row.roster_id, [])))

    def delete(self, roster_id: int) -> bool:
        self.assignments.pop(int(roster_id), None)
        return super().delete(roster_id)

    def list_range(self, *, start, end, status=None, project_id=None, profile_id=None):
        out = []
        for r in self.all():
            if not (r.work_date <= end and r.last_date >= start):
                continue
            if status is not None and r.status != status:
                continue
            if project_id is not None and r.project_id != project_id:
                continue
            if profile_id is not None and r.profile_id != profile_id and profile_id not in r.profile_ids:
                continue
            out.append(r)
        return sorted(out, key=lambda r: (r.work_date, r.start_time))

    def add_profiles(self, roster_id: int, profile_ids: Iterable[int]) -> int:
        assigned = self.assignments.setdefault(int(roster_id), [])
        added = 0
        for pid in profile_ids:
            if pid not in assigned:
                assigned.append(pid)
                added += 1
        return added

    def remove_profile(self, roster_id: int, profile_id: int) -> bool:
        assigned = self.assignments.get(int(roster_id), [])
        if profile_id not in assigned:
            return False
        assigned.remove(profile_id)
        return True


class InMemoryPayrolls(InMemoryTable):
    model = Payroll
    id_field = "payroll_id"

    def __init__(self, profiles: InMemoryProfiles):
        super().__init__()
        self.profiles = profiles
        self.links: dict[int, list[int]] = {}

    def _enrich(self, row):
        profile = self.profiles.rows.get(row.profile_id)
        if not profile:
            return row
        return dataclasses.replace(row, profile_name=profile.full_name, profile_role=profile.role.value)

    def delete(self, payroll_id: int) -> bool:
        self.links.pop(int(payroll_id), None)
        return super().delete(payroll_id)

    def list(self, *, profile_id=None, status=None, start_date=None, end_date=None):
        out = []
        for p in self.all():
            if profile_id is not None and p.profile_id != int(profile_id):
                continue
            if status is not None and p.status != status:
                continue
            if start_date and p.pay_period_end < start_date:
                continue
            if end_date and p.pay_period_start > end_date:
                continue
            out.append(p)
        return sorted(out, key=lambda p: (p.pay_period_start, p.payroll_id), reverse=True)

    def create_with_entries(self, entry_ids: Iterable[int], **fields: Any) -> int:
        payroll_id = self.create(**fields)
        self.links[payroll_id] = list(entry_ids)
        return payroll_id

    def linked_entry_ids(self, payroll_id: int) -> list[int]:
        return list(self.links.get(int(payroll_id), []))

    def already_linked(self, entry_ids: Iterable[int]) -> set[int]:
        linked = {eid for ids in self.links.values() for eid in ids}
        return {eid for eid in entry_ids if eid in linked}


class InMemorySalaryTemplates(InMemoryTable):
    model = SalaryTemplate
    id_field = "template_id"

    def list(self, *, is_active=None):
        return [t for t in self.rows.values() if is_active is None or t.is_active == is_active]


class InMemoryBulkPayrolls(InMemoryTable):
    model = BulkPayroll
    id_field = "bulk_id"

    def __init__(self):
        super().__init__()
        self.items = InMemoryBulkItems()

    def _enrich(self, row):
        items = tuple(i for i in self.items.rows.values() if i.bulk_id == row.bulk_id)
        return dataclasses.replace(row, items=items)

    def list(self):
        return sorted(self.rows.values(), key=lambda b: b.bulk_id, reverse=True)

    def add_item(self, **fields: Any) -> int:
        return self.items.create(**fields)

    def update_item(self, item_id: int, changes: dict[str, Any]) -> bool:
        return self.items.update(item_id, changes)


class InMemoryBulkItems(InMemoryTable):
    model = BulkPayrollItem
    id_field = "item_id"


class InMemoryBankAccounts(InMemoryTable):
    model = BankAccount
    id_field = "account_id"

    def list(self, *, profile_id=None):
        return [a for a in self.rows.values() if profile_id is None or a.profile_id == profile_id]

    def clear_primary(self, *, profile_id, keep_account_id: int) -> None:
        for a in list(self.rows.values()):
            if a.profile_id == profile_id and a.account_id != keep_account_id and a.is_primary:
                self.update(a.account_id, {"is_primary": False})


class InMemoryBankTransactions(InMemoryTable):
    model = BankTransaction
    id_field = "transaction_id"

    def list(self, filters: TransactionFilter):
        out = []
        for t in self.rows.values():
            if filters.type is not None and t.type != filters.type:
                continue
            if filters.category is not None and t.category != filters.category:
                continue
            if filters.bank_account_id is not None and t.bank_account_id != filters.bank_account_id:
                continue
            if filters.profile_id is not None and t.profile_id != filters.profile_id:
                continue
            if filters.start_date and t.transaction_date < filters.start_date:
                continue
            if filters.end_date and t.transaction_date > filters.end_date:
                continue
            if filters.search and filters.search.lower() not in t.description.lower():
                continue
            out.append(t)
        return sorted(out, key=lambda t: (t.transaction_date, t.transaction_id), reverse=True)


class InMemoryNotifications(InMemoryTable):
    model = Notification
    id_field = "notification_id"

    def list_for_recipient(self, recipient_profile_id, *, unread_only=False, start_date=None, end_date=None, limit=200):
        out = []
        for n in self.rows.values():
            if n.recipient_profile_id != recipient_profile_id:
                continue
            if unread_only and n.is_read:
                continue
            if start_date and n.created_at.date() < start_date:
                continue
            if end_date and n.created_at.date() > end_date:
                continue
            out.append(n)
        out.sort(key=lambda n: (n.created_at, n.notification_id), reverse=True)
        return out[:limit]

    def count_unread(self, recipient_profile_id: int) -> int:
        return sum(1 for n in self.rows.values() if n.recipient_profile_id == recipient_profile_id and not n.is_read)

    def mark_all_read(self, recipient_profile_id: int, read_at: datetime) -> int:
        count = 0
        for n in list(self.rows.values()):
            if n.recipient_profile_id == recipient_profile_id and not n.is_read:
                self.update(n.notification_id, {"is_read": True, "read_at": read_at})
                count += 1
        return count


def make_repositories() -> Repositories:
    profiles = InMemoryProfiles()
    clients = InMemoryClients()
    projects = InMemoryProjects(clients)
    working_hours = InMemoryWorkingHours(profiles, projects)
    rosters = InMemoryRosters()
    payrolls = InMemoryPayrolls(profiles)
    templates = InMemorySalaryTemplates()
    bulk_payrolls = InMemoryBulkPayrolls()
    accounts = InMemoryBankAccounts()
    transactions = InMemoryBankTransactions()

    # Mirrors the foreign keys in schema.sql that have no ON DELETE action.
    profiles.rosters = rosters
    profiles.referenced_by = [
        (payrolls, "profile_id"),
        (working_hours, "profile_id"),
        (rosters, "profile_id"),
        (accounts, "profile_id"),
        (transactions, "profile_id"),
        (templates, "profile_id"),
        (bulk_payrolls.items, "profile_id"),
    ]
    clients.referenced_by = [
        (projects, "client_id"),
        (rosters, "client_id"),
        (working_hours, "client_id"),
        (transactions, "client_id"),
    ]
    projects.referenced_by = [
        (working_hours, "project_id"),
        (rosters, "project_id"),
        (transactions, "project_id"),
    ]
    accounts.referenced_by = [
        (transactions, "bank_account_id"),
        (payrolls, "bank_account_id"),
        (templates, "bank_account_id"),
    ]

    return Repositories(
        profiles=profiles,
        role_permissions=InMemoryRolePermissions(),
        clients=clients,
        projects=projects,
        working_hours=working_hours,
        rosters=rosters,
        payrolls=payrolls,
        salary_templates=templates,
        bulk_payrolls=bulk_payrolls,
        bank_accounts=accounts,
        bank_transactions=transactions,
        notifications=InMemoryNotifications(),
    )



PASSWORD = "secret123"


@pytest.fixture
def repos() -> Repositories:
    return make_repositories()


@pytest.fixture
def container(repos):
    return assemble_container(repos)


@pytest.fixture
def world(repos):
    """Admin, two employees, one client with one project."""

    password_hash = generate_password_hash(PASSWORD)

    def profile(email, name, role, rate):
        return repos.profiles.create(
            email=email,
            full_name=name,
            role=role,
            password_hash=password_hash,
            employment_type=EmploymentType.CASUAL,
            hourly_rate=Decimal(rate),
            is_active=True,
        )

    admin_id = profile("admin@example.com", "Ada Admin", Role.ADMIN, "0")
    alice_id = profile("alice@example.com", "Alice Worker", Role.EMPLOYEE, "30.00")
    bob_id = profile("bob@example.com", "Bob Worker", Role.EMPLOYEE, "25.00")
    accountant_id = profile("acc@example.com", "Cara Accountant", Role.ACCOUNTANT, "40.00")
    client_id = repos.clients.create(name="Acme", email="ops@acme.test", company="Acme Pty Ltd")
    project_id = repos.projects.create(name="Warehouse", client_id=client_id, start_date=date(2025, 1, 1))

    return SimpleNamespace(
        admin_id=admin_id,
        alice_id=alice_id,
        bob_id=bob_id,
        accountant_id=accountant_id,
        client_id=client_id,
        project_id=project_id,
        password=PASSWORD,
    )
