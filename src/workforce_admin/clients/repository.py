from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import ClientStatus
from .model import Client


class ClientRepository(Protocol):
    def get_by_id(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, client_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, client_id: int) -> bool:
        raise NotImplementedError

    def list(self, *, status: Optional[ClientStatus] = None, search: Optional[str] = None) -> Sequence[Client]:
        raise NotImplementedError

    def count_references(self, client_id: int) -> int:
        """Projects, rosters, working hours and transactions that point at the client."""

        raise NotImplementedError
