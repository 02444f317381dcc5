from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, request

from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS, DEFAULT_TOP_EARNERS
from ..core.enums import Permission
from ..web.auth import permission_required
from ..web.params import arg_date, arg_id, ok
from ..working_hours.controller import parse_status
from .export import EXCEL_MIMETYPE, rows_to_csv, rows_to_excel


def _period() -> tuple[date, date]:
    end = arg_date("end", date.today())
    start = arg_date("start", end - timedelta(days=DEFAULT_REPORT_DAYS))
    return start, end


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _export_rows():
        start, end = _period()
        rows = reports.working_hours_rows(
            start=start,
            end=end,
            profile_id=arg_id("profile_id"),
            client_id=arg_id("client_id"),
            project_id=arg_id("project_id"),
            status=parse_status(request.args.get("status")),
        )
        return start, end, rows

    @app.route("/api/dashboard", endpoint="dashboard_stats")
    @permission_required(Permission.DASHBOARD_VIEW)
    def dashboard():
        return ok(reports.dashboard())

    @app.route("/api/reports/hours", endpoint="reports_hours")
    @permission_required(Permission.REPORTS_VIEW)
    def hours_report():
        start, end = _period()
        return ok(
            reports.hours_report(
                start=start,
                end=end,
                profile_id=arg_id("profile_id"),
                client_id=arg_id("client_id"),
                project_id=arg_id("project_id"),
            )
        )

    @app.route("/api/reports/payroll", endpoint="reports_payroll")
    @permission_required(Permission.REPORTS_VIEW)
    def payroll_report():
        start, end = _period()
        top = int(request.args.get("top") or DEFAULT_TOP_EARNERS)
        return ok(reports.payroll_report(start=start, end=end, top=top))

    @app.route("/api/reports/bank", endpoint="reports_bank")
    @permission_required(Permission.REPORTS_VIEW)
    def bank_report():
        start, end = _period()
        return ok(reports.bank_report(start=start, end=end))

    @app.route("/api/reports/working-hours.csv", endpoint="reports_working_hours_csv")
    @permission_required(Permission.REPORTS_GENERATE)
    def working_hours_csv():
        start, end, rows = _export_rows()
        filename = f"working_hours_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            rows_to_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/working-hours.xlsx", endpoint="reports_working_hours_xlsx")
    @permission_required(Permission.REPORTS_GENERATE)
    def working_hours_xlsx():
        start, end, rows = _export_rows()
        filename = f"working_hours_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.xlsx"
        return app.response_class(
            rows_to_excel(rows),
            mimetype=EXCEL_MIMETYPE,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
