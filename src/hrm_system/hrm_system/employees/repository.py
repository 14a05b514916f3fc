from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        email: str,
        password_hash: str,
        full_name: str,
        position: str,
        salary: Decimal,
        role: Role,
        join_date: date,
    ) -> int:
        raise NotImplementedError

    def list(self, *, search: Optional[str] = None, position: Optional[str] = None) -> Sequence[Employee]:
        """Ordered by full name; ``search`` is a case-insensitive name substring."""

        raise NotImplementedError

    def update_fields(self, employee_id: int, fields: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def has_dependent_records(self, employee_id: int) -> bool:
        """True while attendance, leave (own or approved) or payroll rows point at the employee."""

        raise NotImplementedError

    def delete(self, employee_id: int) -> bool:
        raise NotImplementedError
