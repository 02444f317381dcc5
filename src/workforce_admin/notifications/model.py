from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import NotificationActionType, NotificationPriority


@dataclass(frozen=True)
class Notification:
    notification_id: int
    recipient_profile_id: int
    title: str
    message: str
    type: str
    created_at: datetime
    priority: NotificationPriority = NotificationPriority.MEDIUM
    action_type: NotificationActionType = NotificationActionType.NONE
    sender_profile_id: Optional[int] = None
    action_data: Optional[dict[str, Any]] = None
    related_id: Optional[int] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    is_actioned: bool = False
    actioned_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "recipient_profile_id": self.recipient_profile_id,
            "sender_profile_id": self.sender_profile_id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "priority": self.priority.value,
            "action_type": self.action_type.value,
            "action_data": self.action_data,
            "related_id": self.related_id,
            "is_read": self.is_read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "is_actioned": self.is_actioned,
            "actioned_at": self.actioned_at.isoformat() if self.actioned_at else None,
            "created_at": self.created_at.isoformat(),
        }
