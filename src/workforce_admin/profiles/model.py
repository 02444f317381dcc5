from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import EmploymentType, Role


@dataclass(frozen=True)
class Profile:
    """Domain entity: an employee/user profile.

    Plain data object, no DB access here.
    """

    profile_id: int
    email: str
    full_name: str
    role: Role
    password_hash: str
    phone: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    hourly_rate: Decimal = Decimal("0")
    salary: Optional[Decimal] = None
    tax_file_number: Optional[str] = None
    start_date: Optional[date] = None
    full_address: Optional[str] = None
    is_active: bool = True

    def to_public_dict(self) -> dict:
        return {
            "profile_id": self.profile_id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "phone": self.phone,
            "employment_type": self.employment_type.value if self.employment_type else None,
            "hourly_rate": str(self.hourly_rate),
            "salary": str(self.salary) if self.salary is not None else None,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "full_address": self.full_address,
            "is_active": self.is_active,
        }
