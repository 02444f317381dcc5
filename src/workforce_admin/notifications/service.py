from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import NotificationActionType, NotificationPriority
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


def _parse_priority(value: Any) -> NotificationPriority:
    try:
        return NotificationPriority(value)
    except ValueError:
        raise ValidationError(f"Unknown priority: {value}")


def _parse_action_type(value: Any) -> NotificationActionType:
    try:
        return NotificationActionType(value)
    except ValueError:
        raise ValidationError(f"Unknown action type: {value}")


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def _own(self, notification_id: int, profile_id: int) -> Notification:
        notification = self._notifications.get_by_id(notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.recipient_profile_id != int(profile_id):
            raise AuthorizationError("Not your notification")
        return notification

    def send(
        self,
        *,
        recipient_profile_id: int,
        title: str,
        message: str,
        type: str = "general",
        priority: Any = NotificationPriority.MEDIUM,
        action_type: Any = NotificationActionType.NONE,
        action_data: Optional[dict] = None,
        sender_profile_id: Optional[int] = None,
        related_id: Optional[int] = None,
    ) -> int:
        notification_id = self._notifications.create(
            recipient_profile_id=int(recipient_profile_id),
            sender_profile_id=sender_profile_id,
            title=require_non_empty(title, "Title"),
            message=require_non_empty(message, "Message"),
            type=require_non_empty(type, "Type"),
            priority=_parse_priority(priority),
            action_type=_parse_action_type(action_type),
            action_data=action_data,
            related_id=related_id,
            is_read=False,
            is_actioned=False,
            created_at=now_local(),
        )
        logger.debug("Notification %s sent to profile %s", notification_id, recipient_profile_id)
        return notification_id

    def send_bulk(self, *, recipient_profile_ids: Iterable[int], **fields: Any) -> list[int]:
        recipients: list[int] = []
        for recipient in recipient_profile_ids:
            if int(recipient) not in recipients:
                recipients.append(int(recipient))
        if not recipients:
            raise ValidationError("Select at least one recipient")
        return [self.send(recipient_profile_id=r, **fields) for r in recipients]

    def list_for_recipient(
        self,
        *,
        profile_id: int,
        unread_only: bool = False,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        return self._notifications.list_for_recipient(
            int(profile_id),
            unread_only=unread_only,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )

    def unread_count(self, *, profile_id: int) -> int:
        return self._notifications.count_unread(int(profile_id))

    def mark_read(self, *, notification_id: int, profile_id: int) -> Notification:
        notification = self._own(notification_id, profile_id)
        if not notification.is_read:
            self._notifications.update(notification_id, {"is_read": True, "read_at": now_local()})
        return self._own(notification_id, profile_id)

    def mark_all_read(self, *, profile_id: int) -> int:
        return self._notifications.mark_all_read(int(profile_id), now_local())

    def record_action(self, *, notification_id: int, profile_id: int) -> Notification:
        notification = self._own(notification_id, profile_id)
        if notification.action_type == NotificationActionType.NONE:
            raise ValidationError("Notification has no action")
        if notification.is_actioned:
            raise ConflictError("Action already taken")
        now = now_local()
        changes: dict[str, Any] = {"is_actioned": True, "actioned_at": now}
        if not notification.is_read:
            changes.update(is_read=True, read_at=now)
        self._notifications.update(notification_id, changes)
        return self._own(notification_id, profile_id)

    def delete(self, *, notification_id: int, profile_id: int) -> None:
        self._own(notification_id, profile_id)
        if not self._notifications.delete(notification_id):
            raise ValidationError("Failed to delete notification")
