from __future__ import annotations

from typing import Any, Optional

from ..common.validators import optional_text, require_email, require_non_empty
from ..core.enums import ClientStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Client
from .repository import ClientRepository


def _parse_status(value: Any) -> ClientStatus:
    try:
        return ClientStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown client status: {value}")


class ClientService:
    def __init__(self, clients: ClientRepository):
        self._clients = clients

    def get(self, client_id: int) -> Client:
        client = self._clients.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def list(self, *, status: Optional[str] = None, search: Optional[str] = None):
        return self._clients.list(status=_parse_status(status) if status else None, search=optional_text(search))

    def create(self, *, name: str, email: str, company: str, phone: Optional[str] = None) -> int:
        return self._clients.create(
            name=require_non_empty(name, "Name"),
            email=require_email(email),
            company=require_non_empty(company, "Company"),
            phone=optional_text(phone),
            status=ClientStatus.ACTIVE,
        )

    def update(self, *, client_id: int, **fields: Any) -> Client:
        self.get(client_id)
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key == "name":
                changes[key] = require_non_empty(value, "Name")
            elif key == "company":
                changes[key] = require_non_empty(value, "Company")
            elif key == "email":
                changes[key] = require_email(value)
            elif key == "phone":
                changes[key] = optional_text(value)
            elif key == "status":
                changes[key] = _parse_status(value)
            else:
                raise ValidationError(f"Field cannot be changed: {key}")
        if changes:
            self._clients.update(client_id, changes)
        return self.get(client_id)

    def set_status(self, *, client_id: int, status: str) -> Client:
        return self.update(client_id=client_id, status=status)

    def delete(self, *, client_id: int) -> None:
        self.get(client_id)
        if self._clients.count_references(client_id) > 0:
            raise ConflictError("Client is still referenced by projects or other records; mark it inactive instead")
        if not self._clients.delete(client_id):
            raise ValidationError("Failed to delete client")
