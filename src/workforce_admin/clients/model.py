from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ClientStatus


@dataclass(frozen=True)
class Client:
    client_id: int
    name: str
    email: str
    company: str
    phone: Optional[str] = None
    status: ClientStatus = ClientStatus.ACTIVE

    def to_dict(self) -> dict:
        return {
            "client_id": self.client_id,
            "name": self.name,
            "email": self.email,
            "company": self.company,
            "phone": self.phone,
            "status": self.status.value,
        }
