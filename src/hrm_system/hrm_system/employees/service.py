from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc, parse_iso_date
from ..common.validators import (
    require_admin,
    require_enum,
    require_min_length,
    require_non_empty,
    require_non_negative_amount,
    require_text,
)
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    DuplicateKeyError,
    EmployeeHasRecords,
    EmployeeNotFound,
    ReferencedRecordError,
    ValidationError,
)
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

SELF_EDITABLE_FIELDS = frozenset({"full_name", "phone", "address", "date_of_birth"})
ADMIN_EDITABLE_FIELDS = SELF_EDITABLE_FIELDS | {"position", "salary", "role", "join_date"}


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    employee_id: int
    full_name: str
    role: Role


class AuthService:
    """Use case: register and authenticate employees."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def register(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        position: str = "Employee",
        today: Optional[date] = None,
    ) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is not valid")
        require_min_length(password, "Password", 6)
        full_name = require_non_empty(full_name, "Full name")
        position = require_text(position, "Position") or "Employee"

        if self._employees.get_by_email(email):
            raise ValidationError("Email is already registered")

        try:
            employee_id = self._employees.create(
                email=email,
                password_hash=generate_password_hash(password),
                full_name=full_name,
                position=position,
                salary=Decimal("0"),
                role=Role.EMPLOYEE,
                join_date=today or now_utc().date(),
            )
        except DuplicateKeyError:
            raise ValidationError("Email is already registered")

        logger.info("Employee %s registered", employee_id)
        return SessionUser(employee_id=employee_id, full_name=full_name, role=Role.EMPLOYEE)

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError("Email and password are required")
        employee = self._employees.get_by_email(email.strip().lower())
        if not employee:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(employee.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.warning("Failed login for employee %s", employee.employee_id)
            raise AuthenticationError("Invalid email or password")

        return SessionUser(employee_id=employee.employee_id, full_name=employee.full_name, role=employee.role)


class EmployeeService:
    """Use case: employee records (self-service profile and admin management)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get_profile(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(int(employee_id))
        return employee

    def list_employees(
        self,
        *,
        caller_role: Role,
        search: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Sequence[Employee]:
        require_admin(caller_role)
        return self._employees.list(search=(search or "").strip() or None, position=(position or "").strip() or None)

    def update_profile(self, *, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        """Self-service edit: name, phone, address and date of birth only."""

        forbidden = set(changes) - SELF_EDITABLE_FIELDS
        if forbidden:
            raise ValidationError(f"Fields not editable from profile: {', '.join(sorted(forbidden))}")
        return self._apply(int(employee_id), changes)

    def admin_update(self, *, caller_role: Role, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        require_admin(caller_role)
        unknown = set(changes) - ADMIN_EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown employee fields: {', '.join(sorted(unknown))}")
        return self._apply(int(employee_id), changes)

    def delete_employee(self, *, caller_role: Role, caller_id: int, employee_id: int) -> None:
        """Remove an employee who has no attendance, leave or payroll history.

        Dependent rows are never cascaded; an employee with history raises
        ``EmployeeHasRecords`` and should be kept.
        """

        require_admin(caller_role)
        employee_id = int(employee_id)
        if employee_id == int(caller_id):
            raise ValidationError("You cannot delete your own account")
        self.get_profile(employee_id)

        if self._employees.has_dependent_records(employee_id):
            logger.warning("Refused to delete employee %s with history", employee_id)
            raise EmployeeHasRecords(employee_id)

        try:
            deleted = self._employees.delete(employee_id)
        except ReferencedRecordError:
            # History was written between the check and the delete.
            raise EmployeeHasRecords(employee_id)
        if not deleted:
            raise EmployeeNotFound(employee_id)
        logger.info("Employee %s deleted", employee_id)

    def _apply(self, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        self.get_profile(employee_id)
        cleaned = self._clean(changes)
        if cleaned:
            self._employees.update_fields(employee_id, cleaned)
            logger.info("Employee %s updated fields %s", employee_id, sorted(cleaned))
        return self.get_profile(employee_id)

    @staticmethod
    def _clean(changes: Mapping[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for field, value in changes.items():
            if field == "full_name":
                out[field] = require_non_empty(value, "Full name")
            elif field == "position":
                out[field] = require_non_empty(value, "Position")
            elif field in {"phone", "address"}:
                out[field] = require_text(value, field.capitalize())
            elif field == "date_of_birth":
                out[field] = _optional_date(value)
            elif field == "join_date":
                out[field] = _optional_date(value)
                if out[field] is None:
                    raise ValidationError("Join date is required")
            elif field == "salary":
                out[field] = require_non_negative_amount(value, "Salary")
            elif field == "role":
                out[field] = require_enum(Role, value, "Role")
        return out


def _optional_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(value)
