from __future__ import annotations

from typing import Optional

from flask import Flask, g, request

from ..container import Container
from ..core.enums import Permission, WorkingHoursStatus
from ..core.exceptions import AuthorizationError, ValidationError
from ..web.auth import permission_required
from ..web.params import (
    arg_date,
    arg_id,
    body_date,
    body_id,
    body_ids,
    body_optional_id,
    body_optional_time,
    body_time,
    convert_dates,
    convert_times,
    json_body,
    ok,
    patch_body,
)
from .model import WorkingHoursFilter


def parse_status(value: Optional[str]) -> Optional[WorkingHoursStatus]:
    if not value:
        return None
    try:
        return WorkingHoursStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown working hours status: {value}")


def filters_from_args(*, profile_id: Optional[int] = None) -> WorkingHoursFilter:
    start = arg_date("start")
    end = arg_date("end")
    if start and end and end < start:
        raise ValidationError("End date must be on or after start date")
    return WorkingHoursFilter(
        profile_id=profile_id if profile_id is not None else arg_id("profile_id"),
        client_id=arg_id("client_id"),
        project_id=arg_id("project_id"),
        roster_id=arg_id("roster_id"),
        status=parse_status(request.args.get("status")),
        start_date=start,
        end_date=end,
    )


def register(app: Flask, container: Container) -> None:
    permissions = container.permission_service

    def _sees_everyone() -> bool:
        return permissions.has_permission(g.user.role, Permission.WORKING_HOURS_MANAGE) or permissions.has_permission(
            g.user.role, Permission.WORKING_HOURS_APPROVE
        )

    @app.route("/api/working-hours", endpoint="working_hours_list")
    @permission_required(Permission.WORKING_HOURS_VIEW)
    def list_entries():
        scope = None if _sees_everyone() else g.user.profile_id
        entries = container.working_hours_service.list(filters_from_args(profile_id=scope))
        return ok([e.to_dict() for e in entries])

    @app.route("/api/working-hours/summary", endpoint="working_hours_summary")
    @permission_required(Permission.WORKING_HOURS_VIEW)
    def summary():
        scope = None if _sees_everyone() else g.user.profile_id
        return ok(container.working_hours_service.summary(filters_from_args(profile_id=scope)))

    @app.route("/api/working-hours/<int:entry_id>", endpoint="working_hours_get")
    @permission_required(Permission.WORKING_HOURS_VIEW)
    def get_entry(entry_id: int):
        entry = container.working_hours_service.get(entry_id)
        if entry.profile_id != g.user.profile_id and not _sees_everyone():
            raise AuthorizationError("You can only view your own working hours")
        return ok(entry.to_dict())

    @app.route("/api/working-hours", methods=["POST"], endpoint="working_hours_create")
    @permission_required(Permission.WORKING_HOURS_MANAGE)
    def log_hours():
        data = json_body()
        entry_id = container.working_hours_service.log_hours(
            profile_id=body_optional_id(data, "profile_id") or g.user.profile_id,
            client_id=body_id(data, "client_id"),
            project_id=body_id(data, "project_id"),
            work_date=body_date(data, "date"),
            start_time=body_time(data, "start_time"),
            end_time=body_time(data, "end_time"),
            sign_in_time=body_optional_time(data, "sign_in_time"),
            sign_out_time=body_optional_time(data, "sign_out_time"),
            hourly_rate=data.get("hourly_rate"),
            notes=data.get("notes"),
        )
        return ok(container.working_hours_service.get(entry_id).to_dict(), 201)

    @app.route("/api/working-hours/<int:entry_id>", methods=["PATCH"], endpoint="working_hours_update")
    @permission_required(Permission.WORKING_HOURS_MANAGE)
    def update_entry(entry_id: int):
        data = patch_body("entry_id")
        if "date" in data:
            data["work_date"] = data.pop("date")
        data = convert_dates(data, "work_date")
        data = convert_times(
            data, "start_time", "end_time", "sign_in_time", "sign_out_time", nullable=("sign_in_time", "sign_out_time")
        )
        return ok(container.working_hours_service.update_entry(entry_id=entry_id, **data).to_dict())

    @app.route("/api/working-hours/<int:entry_id>/approve", methods=["POST"], endpoint="working_hours_approve")
    @permission_required(Permission.WORKING_HOURS_APPROVE)
    def approve(entry_id: int):
        return ok(container.working_hours_service.approve(entry_id=entry_id).to_dict())

    @app.route("/api/working-hours/<int:entry_id>/reject", methods=["POST"], endpoint="working_hours_reject")
    @permission_required(Permission.WORKING_HOURS_APPROVE)
    def reject(entry_id: int):
        return ok(container.working_hours_service.reject(entry_id=entry_id).to_dict())

    @app.route("/api/working-hours/approve", methods=["POST"], endpoint="working_hours_approve_many")
    @permission_required(Permission.WORKING_HOURS_APPROVE)
    def approve_many():
        count = container.working_hours_service.approve_many(entry_ids=body_ids(json_body(), "entry_ids"))
        return ok({"approved": count})

    @app.route("/api/working-hours/<int:entry_id>/reopen", methods=["POST"], endpoint="working_hours_reopen")
    @permission_required(Permission.WORKING_HOURS_APPROVE)
    def reopen(entry_id: int):
        entry = container.working_hours_service.revert_to_pending(current_role=g.user.role, entry_id=entry_id)
        return ok(entry.to_dict())

    @app.route("/api/working-hours/<int:entry_id>", methods=["DELETE"], endpoint="working_hours_delete")
    @permission_required(Permission.WORKING_HOURS_MANAGE)
    def delete_entry(entry_id: int):
        container.working_hours_service.delete_entry(entry_id=entry_id)
        return ok()
