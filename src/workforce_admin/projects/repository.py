from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import ProjectStatus
from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, project_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, project_id: int) -> bool:
        raise NotImplementedError

    def list(
        self,
        *,
        client_id: Optional[int] = None,
        status: Optional[ProjectStatus] = None,
    ) -> Sequence[Project]:
        raise NotImplementedError

    def count_references(self, project_id: int) -> int:
        """Working hours, rosters and transactions that point at the project."""

        raise NotImplementedError
