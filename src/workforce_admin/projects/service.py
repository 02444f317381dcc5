from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ..clients.repository import ClientRepository
from ..common.validators import optional_text, require_decimal, require_non_empty, require_positive_id
from ..core.enums import ProjectStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Project
from .repository import ProjectRepository


def _parse_status(value: Any) -> ProjectStatus:
    try:
        return ProjectStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown project status: {value}")


class ProjectService:
    def __init__(self, projects: ProjectRepository, clients: ClientRepository):
        self._projects = projects
        self._clients = clients

    def get(self, project_id: int) -> Project:
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list(self, *, client_id: Optional[int] = None, status: Optional[str] = None):
        return self._projects.list(client_id=client_id, status=_parse_status(status) if status else None)

    def create(
        self,
        *,
        name: str,
        client_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        description: Optional[str] = None,
        budget: Any = 0,
    ) -> int:
        name = require_non_empty(name, "Name")
        if not self._clients.get_by_id(int(client_id)):
            raise NotFoundError("Client not found")
        if end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        return self._projects.create(
            name=name,
            client_id=int(client_id),
            start_date=start_date,
            end_date=end_date,
            description=optional_text(description),
            budget=require_decimal(budget or 0, "Budget"),
            status=ProjectStatus.ACTIVE,
        )

    def update(self, *, project_id: int, **fields: Any) -> Project:
        project = self.get(project_id)
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key == "name":
                changes[key] = require_non_empty(value, "Name")
            elif key == "description":
                changes[key] = optional_text(value)
            elif key == "client_id":
                client_id = require_positive_id(value, "client_id")
                if not self._clients.get_by_id(client_id):
                    raise NotFoundError("Client not found")
                changes[key] = client_id
            elif key in ("start_date", "end_date"):
                changes[key] = value
            elif key == "budget":
                changes[key] = require_decimal(value, "Budget")
            elif key == "status":
                changes[key] = _parse_status(value)
            else:
                raise ValidationError(f"Field cannot be changed: {key}")

        start = changes.get("start_date", project.start_date)
        end = changes.get("end_date", project.end_date)
        if start and end and end < start:
            raise ValidationError("End date cannot be before start date")

        if changes:
            self._projects.update(project_id, changes)
        return self.get(project_id)

    def set_status(self, *, project_id: int, status: str) -> Project:
        return self.update(project_id=project_id, status=status)

    def delete(self, *, project_id: int) -> None:
        self.get(project_id)
        if self._projects.count_references(project_id) > 0:
            raise ConflictError("Project is still referenced by other records; mark it completed instead")
        if not self._projects.delete(project_id):
            raise ValidationError("Failed to delete project")
