from __future__ import annotations

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from ..banking.model import TransactionFilter
from ..banking.service import BankingService
from ..clients.repository import ClientRepository
from ..common.time_math import ZERO, average, to_hours, to_money, total
from ..core.constants import DEFAULT_TOP_EARNERS
from ..core.enums import ClientStatus, PayrollStatus, ProjectStatus, WorkingHoursStatus
from ..core.exceptions import ValidationError
from ..payroll.model import Payroll
from ..payroll.repository import PayrollRepository
from ..profiles.repository import ProfileRepository
from ..projects.repository import ProjectRepository
from ..working_hours.model import WorkingHour, WorkingHoursFilter
from ..working_hours.repository import WorkingHoursRepository


def _check_period(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValidationError("End date must be on or after start date")


def _group_hours(entries: Iterable[WorkingHour], key: Callable[[WorkingHour], Any], label: Callable[[WorkingHour], Any]) -> list[dict]:
    groups: dict[Any, dict] = {}
    for e in entries:
        g = groups.setdefault(
            key(e),
            {"id": key(e), "name": label(e), "entries": 0, "hours": ZERO, "overtime_hours": ZERO, "payable": ZERO},
        )
        g["entries"] += 1
        g["hours"] += e.worked_hours
        g["overtime_hours"] += e.overtime_hours
        g["payable"] += e.payable_amount

    out = []
    for g in groups.values():
        out.append(
            {
                "id": g["id"],
                "name": g["name"],
                "entries": g["entries"],
                "hours": str(to_hours(g["hours"])),
                "overtime_hours": str(to_hours(g["overtime_hours"])),
                "payable": str(to_money(g["payable"])),
            }
        )
    out.sort(key=lambda x: Decimal(x["hours"]), reverse=True)
    return out


class ReportService:
    def __init__(
        self,
        profiles: ProfileRepository,
        clients: ClientRepository,
        projects: ProjectRepository,
        working_hours: WorkingHoursRepository,
        payrolls: PayrollRepository,
        banking: BankingService,
    ):
        self._profiles = profiles
        self._clients = clients
        self._projects = projects
        self._working_hours = working_hours
        self._payrolls = payrolls
        self._banking = banking

    def dashboard(self) -> dict:
        return {
            "active_profiles": len(self._profiles.list(is_active=True)),
            "active_clients": len(self._clients.list(status=ClientStatus.ACTIVE)),
            "active_projects": len(self._projects.list(status=ProjectStatus.ACTIVE)),
            "pending_working_hours": len(self._working_hours.list(WorkingHoursFilter(status=WorkingHoursStatus.PENDING))),
            "pending_payrolls": len(self._payrolls.list(status=PayrollStatus.PENDING)),
            "bank_balance": self._banking.balance_summary()["balance"],
        }

    def hours_report(self, *, start: Optional[date] = None, end: Optional[date] = None, **filters: Any) -> dict:
        """Hours between start and end grouped by employee, project, client and status."""

        _check_period(start, end)
        entries = list(self._working_hours.list(WorkingHoursFilter(start_date=start, end_date=end, **filters)))
        statuses = Counter(e.status.value for e in entries)
        hours_by_status: dict[str, Decimal] = {s.value: ZERO for s in WorkingHoursStatus}
        for e in entries:
            hours_by_status[e.status.value] += e.worked_hours

        return {
            "start": start.isoformat() if start else None,
            "end": end.isoformat() if end else None,
            "totals": {
                "entries": len(entries),
                "scheduled_hours": str(to_hours(total(e.total_hours for e in entries))),
                "worked_hours": str(to_hours(total(e.worked_hours for e in entries))),
                "overtime_hours": str(to_hours(total(e.overtime_hours for e in entries))),
                "payable": str(total(e.payable_amount for e in entries)),
            },
            "by_employee": _group_hours(entries, lambda e: e.profile_id, lambda e: e.profile_name),
            "by_project": _group_hours(entries, lambda e: e.project_id, lambda e: e.project_name),
            "by_client": _group_hours(entries, lambda e: e.client_id, lambda e: e.client_name),
            "by_status": [
                {"status": status, "entries": statuses.get(status, 0), "hours": str(to_hours(hours))}
                for status, hours in hours_by_status.items()
            ],
        }

    def _role_of(self, payroll: Payroll, cache: dict[int, str]) -> str:
        if payroll.profile_role:
            return payroll.profile_role
        if payroll.profile_id not in cache:
            profile = self._profiles.get_by_id(payroll.profile_id)
            cache[payroll.profile_id] = profile.role.value if profile else "unknown"
        return cache[payroll.profile_id]

    def payroll_report(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        top: int = DEFAULT_TOP_EARNERS,
    ) -> dict:
        _check_period(start, end)
        payrolls = list(self._payrolls.list(start_date=start, end_date=end))

        monthly: dict[str, dict[str, Any]] = {}
        by_role: dict[str, dict[str, Any]] = {}
        earners: dict[int, dict[str, Any]] = {}
        roles: dict[int, str] = {}
        for p in payrolls:
            month = p.pay_period_start.strftime("%Y-%m")
            m = monthly.setdefault(month, {"month": month, "count": 0, "hours": ZERO, "gross": ZERO, "net": ZERO})
            m["count"] += 1
            m["hours"] += p.total_hours
            m["gross"] += p.gross_pay
            m["net"] += p.net_pay

            role = self._role_of(p, roles)
            r = by_role.setdefault(role, {"role": role, "count": 0, "gross": ZERO, "net": ZERO})
            r["count"] += 1
            r["gross"] += p.gross_pay
            r["net"] += p.net_pay

            e = earners.setdefault(
                p.profile_id,
                {"profile_id": p.profile_id, "name": p.profile_name, "net": ZERO, "hours": ZERO, "payrolls": 0},
            )
            e["net"] += p.net_pay
            e["hours"] += p.total_hours
            e["payrolls"] += 1

        top_earners = sorted(earners.values(), key=lambda x: x["net"], reverse=True)[: int(top)]

        return {
            "summary": {
                "payrolls": len(payrolls),
                "employees": len(earners),
                "total_gross": str(total(p.gross_pay for p in payrolls)),
                "total_deductions": str(total(p.deductions for p in payrolls)),
                "total_net": str(total(p.net_pay for p in payrolls)),
                "total_hours": str(to_hours(total(p.total_hours for p in payrolls))),
                "average_rate": str(average(p.hourly_rate for p in payrolls)),
                "paid": sum(1 for p in payrolls if p.status == PayrollStatus.PAID),
            },
            "monthly": [
                {
                    "month": m["month"],
                    "count": m["count"],
                    "hours": str(to_hours(m["hours"])),
                    "gross": str(to_money(m["gross"])),
                    "net": str(to_money(m["net"])),
                }
                for m in sorted(monthly.values(), key=lambda x: x["month"])
            ],
            "by_role": [
                {"role": r["role"], "count": r["count"], "gross": str(to_money(r["gross"])), "net": str(to_money(r["net"]))}
                for r in sorted(by_role.values(), key=lambda x: x["role"])
            ],
            "top_earners": [
                {
                    "profile_id": e["profile_id"],
                    "name": e["name"],
                    "payrolls": e["payrolls"],
                    "hours": str(to_hours(e["hours"])),
                    "net": str(to_money(e["net"])),
                }
                for e in top_earners
            ],
        }

    def bank_report(self, *, start: Optional[date] = None, end: Optional[date] = None) -> dict:
        _check_period(start, end)
        return {
            "balance": self._banking.balance_summary(start_date=start, end_date=end),
            "by_category": self._banking.totals_by_category(TransactionFilter(start_date=start, end_date=end)),
        }

    def working_hours_rows(self, *, start: Optional[date] = None, end: Optional[date] = None, **filters: Any) -> list[dict]:
        """Flat rows for CSV/Excel export, oldest first."""

        _check_period(start, end)
        entries = self._working_hours.list(WorkingHoursFilter(start_date=start, end_date=end, **filters))
        rows = [e.to_dict() for e in entries]
        rows.sort(key=lambda r: (r["date"], r["start_time"] or ""))
        return rows
