from __future__ import annotations

from flask import Flask, g

from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Permission
from ..web.auth import permission_required
from ..web.params import arg_bool, arg_date, body_id, body_ids, body_optional_id, json_body, ok, required


def register(app: Flask, container: Container) -> None:
    notifications = container.notification_service

    @app.route("/api/notifications", endpoint="notifications_list")
    @permission_required(Permission.NOTIFICATIONS_VIEW)
    def list_notifications():
        items = notifications.list_for_recipient(
            profile_id=g.user.profile_id,
            unread_only=bool(arg_bool("unread")),
            start_date=arg_date("start"),
            end_date=arg_date("end"),
            limit=DEFAULT_HISTORY_LIMIT,
        )
        return ok(
            [n.to_dict() for n in items],
            unread=notifications.unread_count(profile_id=g.user.profile_id),
        )

    @app.route("/api/notifications/unread-count", endpoint="notifications_unread_count")
    @permission_required(Permission.NOTIFICATIONS_VIEW)
    def unread_count():
        return ok({"unread": notifications.unread_count(profile_id=g.user.profile_id)})

    @app.route("/api/notifications", methods=["POST"], endpoint="notifications_send")
    @permission_required(Permission.EMPLOYEES_MANAGE, Permission.ROSTER_MANAGE, Permission.PAYROLL_MANAGE)
    def send():
        data = json_body()
        fields = {
            "title": required(data, "title"),
            "message": required(data, "message"),
            "type": data.get("type") or "general",
            "priority": data.get("priority") or "medium",
            "action_type": data.get("action_type") or "none",
            "action_data": data.get("action_data"),
            "related_id": body_optional_id(data, "related_id"),
            "sender_profile_id": g.user.profile_id,
        }
        if data.get("recipient_profile_ids"):
            ids = notifications.send_bulk(recipient_profile_ids=body_ids(data, "recipient_profile_ids"), **fields)
        else:
            ids = [notifications.send(recipient_profile_id=body_id(data, "recipient_profile_id"), **fields)]
        return ok({"notification_ids": ids}, 201)

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="notifications_read")
    @permission_required(Permission.NOTIFICATIONS_VIEW)
    def mark_read(notification_id: int):
        item = notifications.mark_read(notification_id=notification_id, profile_id=g.user.profile_id)
        return ok(item.to_dict())

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="notifications_read_all")
    @permission_required(Permission.NOTIFICATIONS_VIEW)
    def mark_all_read():
        return ok({"updated": notifications.mark_all_read(profile_id=g.user.profile_id)})

    @app.route("/api/notifications/<int:notification_id>/action", methods=["POST"], endpoint="notifications_action")
    @permission_required(Permission.NOTIFICATIONS_VIEW)
    def record_action(notification_id: int):
        item = notifications.record_action(notification_id=notification_id, profile_id=g.user.profile_id)
        return ok(item.to_dict())

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="notifications_delete")
    @permission_required(Permission.NOTIFICATIONS_VIEW)
    def delete(notification_id: int):
        notifications.delete(notification_id=notification_id, profile_id=g.user.profile_id)
        return ok()
