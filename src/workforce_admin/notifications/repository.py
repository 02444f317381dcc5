from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, notification_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, notification_id: int) -> bool:
        raise NotImplementedError

    def list_for_recipient(
        self,
        recipient_profile_id: int,
        *,
        unread_only: bool = False,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def count_unread(self, recipient_profile_id: int) -> int:
        raise NotImplementedError

    def mark_all_read(self, recipient_profile_id: int, read_at: datetime) -> int:
        raise NotImplementedError
