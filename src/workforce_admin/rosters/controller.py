from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, g, request

from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Permission, RosterStatus
from ..core.exceptions import ValidationError
from ..web.auth import permission_required
from ..web.params import (
    arg_date,
    arg_id,
    body_date,
    body_id,
    body_ids,
    body_optional_date,
    body_time,
    convert_dates,
    convert_times,
    json_body,
    ok,
    patch_body,
)


def _status_arg():
    value = request.args.get("status")
    if not value:
        return None
    try:
        return RosterStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown roster status: {value}")


def register(app: Flask, container: Container) -> None:
    service = container.roster_service

    def _scope():
        # Without roster_manage a profile only sees rosters it is part of.
        if container.permission_service.has_permission(g.user.role, Permission.ROSTER_MANAGE):
            return arg_id("profile_id")
        return g.user.profile_id

    @app.route("/api/rosters", endpoint="rosters_list")
    @permission_required(Permission.ROSTER_VIEW)
    def list_rosters():
        start = arg_date("start", date.today())
        end = arg_date("end", start + timedelta(days=DEFAULT_REPORT_DAYS))
        rosters = service.list_range(
            start=start,
            end=end,
            status=_status_arg(),
            project_id=arg_id("project_id"),
            profile_id=_scope(),
        )
        return ok([r.to_dict() for r in rosters])

    @app.route("/api/rosters/week", endpoint="rosters_week")
    @permission_required(Permission.ROSTER_VIEW)
    def weekly():
        rosters = service.weekly(day=arg_date("day", date.today()), profile_id=_scope())
        return ok([r.to_dict() for r in rosters])

    @app.route("/api/rosters/report", endpoint="rosters_report")
    @permission_required(Permission.ROSTER_VIEW)
    def day_report():
        return ok(service.day_report(day=arg_date("day", date.today())))

    @app.route("/api/rosters/<int:roster_id>", endpoint="rosters_get")
    @permission_required(Permission.ROSTER_VIEW)
    def get_roster(roster_id: int):
        return ok(service.get(roster_id).to_dict())

    @app.route("/api/rosters", methods=["POST"], endpoint="rosters_create")
    @permission_required(Permission.ROSTER_MANAGE)
    def create_roster():
        data = json_body()
        roster_id = service.create_roster(
            created_by=g.user.profile_id,
            client_id=body_id(data, "client_id"),
            project_id=body_id(data, "project_id"),
            work_date=body_date(data, "date"),
            end_date=body_optional_date(data, "end_date"),
            start_time=body_time(data, "start_time"),
            end_time=body_time(data, "end_time"),
            profile_ids=body_ids(data, "profile_ids"),
            name=data.get("name"),
            notes=data.get("notes"),
            expected_profiles=int(data.get("expected_profiles") or 1),
            per_hour_rate=data.get("per_hour_rate"),
        )
        return ok(service.get(roster_id).to_dict(), 201)

    @app.route("/api/rosters/<int:roster_id>", methods=["PATCH"], endpoint="rosters_update")
    @permission_required(Permission.ROSTER_MANAGE)
    def update_roster(roster_id: int):
        data = patch_body("roster_id")
        if "date" in data:
            data["work_date"] = data.pop("date")
        data = convert_times(convert_dates(data, "work_date", "end_date", nullable=("end_date",)), "start_time", "end_time")
        return ok(service.update_roster(roster_id=roster_id, **data).to_dict())

    @app.route("/api/rosters/<int:roster_id>/profiles", methods=["POST"], endpoint="rosters_assign")
    @permission_required(Permission.ROSTER_MANAGE)
    def assign(roster_id: int):
        roster = service.assign_profiles(roster_id=roster_id, profile_ids=body_ids(json_body(), "profile_ids"))
        return ok(roster.to_dict())

    @app.route(
        "/api/rosters/<int:roster_id>/profiles/<int:profile_id>",
        methods=["DELETE"],
        endpoint="rosters_unassign",
    )
    @permission_required(Permission.ROSTER_MANAGE)
    def unassign(roster_id: int, profile_id: int):
        return ok(service.unassign_profile(roster_id=roster_id, profile_id=profile_id).to_dict())

    @app.route("/api/rosters/<int:roster_id>/confirm", methods=["POST"], endpoint="rosters_confirm")
    @permission_required(Permission.ROSTER_MANAGE)
    def confirm(roster_id: int):
        return ok(service.confirm(roster_id=roster_id).to_dict())

    @app.route("/api/rosters/<int:roster_id>/cancel", methods=["POST"], endpoint="rosters_cancel")
    @permission_required(Permission.ROSTER_MANAGE)
    def cancel(roster_id: int):
        return ok(service.cancel(roster_id=roster_id).to_dict())

    @app.route("/api/rosters/<int:roster_id>/lock", methods=["POST"], endpoint="rosters_lock")
    @permission_required(Permission.ROSTER_MANAGE)
    def lock(roster_id: int):
        locked = bool(json_body().get("locked", True))
        return ok(service.set_locked(roster_id=roster_id, locked=locked).to_dict())

    @app.route("/api/rosters/<int:roster_id>/generate-hours", methods=["POST"], endpoint="rosters_generate_hours")
    @permission_required(Permission.ROSTER_MANAGE)
    def generate_hours(roster_id: int):
        return ok({"created": service.generate_working_hours(roster_id=roster_id)})

    @app.route("/api/rosters/<int:roster_id>", methods=["DELETE"], endpoint="rosters_delete")
    @permission_required(Permission.ROSTER_MANAGE)
    def delete_roster(roster_id: int):
        service.delete_roster(roster_id=roster_id)
        return ok()
