from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import ProjectStatus


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    client_id: int
    start_date: date
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    end_date: Optional[date] = None
    budget: Decimal = Decimal("0")
    client_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "project_id": self.project_id,
            "name": self.name,
            "description": self.description,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "status": self.status.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "budget": str(self.budget),
        }
