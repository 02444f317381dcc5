from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.time_math import average
from ..common.validators import (
    optional_text,
    require_decimal,
    require_email,
    require_min_length,
    require_non_empty,
)
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import EmploymentType, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import Profile
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    profile_id: int
    full_name: str
    email: str
    role: Role


def _parse_role(value: Any) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value}")


def _parse_employment_type(value: Any) -> Optional[EmploymentType]:
    if value in (None, ""):
        return None
    try:
        return EmploymentType(value)
    except ValueError:
        raise ValidationError(f"Unknown employment type: {value}")


class AuthService:
    """Use case: authenticate a profile (login)."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def authenticate(self, email: str, password: str) -> SessionUser:
        profile = self._profiles.get_by_email((email or "").strip().lower())
        if not profile or not profile.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            profile_id=profile.profile_id,
            full_name=profile.full_name,
            email=profile.email,
            role=profile.role,
        )

    def change_password(self, *, profile_id: int, current_password: str, new_password: str) -> None:
        profile = self._profiles.get_by_id(profile_id)
        if not profile:
            raise NotFoundError("Profile not found")
        if not check_password_hash(profile.password_hash, current_password or ""):
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        self._profiles.update(profile_id, {"password_hash": generate_password_hash(new_password)})


class ProfileService:
    """Use case: manage employee profiles."""

    _EDITABLE = (
        "full_name",
        "phone",
        "employment_type",
        "hourly_rate",
        "salary",
        "tax_file_number",
        "start_date",
        "full_address",
        "role",
    )

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def get(self, profile_id: int) -> Profile:
        profile = self._profiles.get_by_id(profile_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def list(self, *, role: Optional[str] = None, is_active: Optional[bool] = None, search: Optional[str] = None):
        return self._profiles.list(
            role=_parse_role(role) if role else None,
            is_active=is_active,
            search=optional_text(search),
        )

    def create_profile(
        self,
        *,
        current_role: Role,
        email: str,
        full_name: str,
        password: str,
        role: Any = Role.EMPLOYEE,
        phone: Optional[str] = None,
        employment_type: Any = None,
        hourly_rate: Any = 0,
        salary: Any = None,
        tax_file_number: Optional[str] = None,
        start_date: Optional[date] = None,
        full_address: Optional[str] = None,
    ) -> int:
        email = require_email(email)
        full_name = require_non_empty(full_name, "Full name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = _parse_role(role)

        if role == Role.ADMIN and current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can create administrator profiles")
        if self._profiles.get_by_email(email):
            raise ConflictError("Email is already registered")

        profile_id = self._profiles.create(
            email=email,
            full_name=full_name,
            role=role,
            password_hash=generate_password_hash(password),
            phone=optional_text(phone),
            employment_type=_parse_employment_type(employment_type),
            hourly_rate=require_decimal(hourly_rate or 0, "Hourly rate"),
            salary=require_decimal(salary, "Salary") if salary not in (None, "") else None,
            tax_file_number=optional_text(tax_file_number),
            start_date=start_date,
            full_address=optional_text(full_address),
            is_active=True,
        )
        logger.info("Created profile %s (%s)", profile_id, role.value)
        return profile_id

    def update_profile(self, *, current_role: Role, profile_id: int, **fields: Any) -> Profile:
        profile = self.get(profile_id)

        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key not in self._EDITABLE:
                raise ValidationError(f"Field cannot be changed: {key}")
            if key == "full_name":
                changes[key] = require_non_empty(value, "Full name")
            elif key == "role":
                role = _parse_role(value)
                if role != profile.role and current_role != Role.ADMIN:
                    raise AuthorizationError("Only administrators can change roles")
                changes[key] = role
            elif key == "employment_type":
                changes[key] = _parse_employment_type(value)
            elif key == "hourly_rate":
                changes[key] = require_decimal(value, "Hourly rate")
            elif key == "salary":
                changes[key] = require_decimal(value, "Salary") if value not in (None, "") else None
            elif key == "start_date":
                changes[key] = value
            else:
                changes[key] = optional_text(value)

        if changes:
            self._profiles.update(profile_id, changes)
        return self.get(profile_id)

    def set_active(self, *, profile_id: int, is_active: bool, current_profile_id: Optional[int] = None) -> None:
        self.get(profile_id)
        if not is_active and current_profile_id == profile_id:
            raise ValidationError("You cannot deactivate your own profile")
        self._profiles.update(profile_id, {"is_active": int(bool(is_active))})

    def delete_profile(self, *, current_role: Role, profile_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can delete profiles")

        profile = self.get(profile_id)
        if profile.role == Role.ADMIN:
            raise ValidationError("Administrator profiles cannot be deleted")
        if self._profiles.has_dependents(profile_id):
            raise ConflictError("Profile is still referenced by other records; deactivate it instead")

        if not self._profiles.delete_by_id(profile_id):
            raise ValidationError("Failed to delete profile")

    def stats(self) -> dict:
        profiles = list(self._profiles.list())
        active = [p for p in profiles if p.is_active]
        by_role = Counter(p.role.value for p in profiles)
        by_type = Counter(p.employment_type.value for p in profiles if p.employment_type)
        return {
            "total": len(profiles),
            "active": len(active),
            "inactive": len(profiles) - len(active),
            "by_role": dict(by_role),
            "by_employment_type": dict(by_type),
            "average_hourly_rate": str(average(p.hourly_rate for p in active if p.hourly_rate)),
        }
