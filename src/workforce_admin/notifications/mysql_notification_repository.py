from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import NotificationActionType, NotificationPriority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, update_assignments, where_clause
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = (
    "notification_id, recipient_profile_id, sender_profile_id, title, message, type, priority, "
    "action_type, action_data, related_id, is_read, read_at, is_actioned, actioned_at, created_at"
)


def _row_to_notification(r: dict) -> Notification:
    action_data = r.get("action_data")
    if isinstance(action_data, (str, bytes)):
        action_data = json.loads(action_data)
    return Notification(
        notification_id=int(r["notification_id"]),
        recipient_profile_id=int(r["recipient_profile_id"]),
        sender_profile_id=r.get("sender_profile_id"),
        title=r["title"],
        message=r["message"],
        type=r["type"],
        priority=NotificationPriority(r.get("priority") or NotificationPriority.MEDIUM.value),
        action_type=NotificationActionType(r.get("action_type") or NotificationActionType.NONE.value),
        action_data=action_data,
        related_id=r.get("related_id"),
        is_read=bool(r.get("is_read")),
        read_at=r.get("read_at"),
        is_actioned=bool(r.get("is_actioned")),
        actioned_at=r.get("actioned_at"),
        created_at=r["created_at"],
    )


def _encode(fields: dict[str, Any]) -> dict[str, Any]:
    out = dict(fields)
    if out.get("action_data") is not None:
        out["action_data"] = json.dumps(out["action_data"])
    return out


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (notification_id,))
            row = fetchone(cur)
            return _row_to_notification(row) if row else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(_encode(fields))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO notifications SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, notification_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(_encode(changes))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE notifications SET {assignments} WHERE notification_id=%s",
                params + (notification_id,),
            )
            return cur.rowcount > 0

    def delete(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications WHERE notification_id=%s", (notification_id,))
            return cur.rowcount > 0

    def list_for_recipient(
        self,
        recipient_profile_id: int,
        *,
        unread_only: bool = False,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[Notification]:
        where, params = where_clause(
            [
                ("recipient_profile_id=%s", recipient_profile_id),
                ("is_read=%s", 0 if unread_only else None),
                ("DATE(created_at) >= %s", start_date),
                ("DATE(created_at) <= %s", end_date),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM notifications {where} ORDER BY created_at DESC, notification_id DESC LIMIT %s",
                params + (int(limit),),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, recipient_profile_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM notifications WHERE recipient_profile_id=%s AND is_read=0",
                (recipient_profile_id,),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def mark_all_read(self, recipient_profile_id: int, read_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1, read_at=%s WHERE recipient_profile_id=%s AND is_read=0",
                (read_at, recipient_profile_id),
            )
            return int(cur.rowcount)
