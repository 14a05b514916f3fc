from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: This is a plain data object (no DB access code). ``password_hash`` is
    never serialized by ``to_public_dict``.
    """

    employee_id: int
    email: str
    full_name: str
    position: str
    salary: Decimal
    role: Role
    join_date: date
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    password_hash: str = ""

    def to_public_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "email": self.email,
            "full_name": self.full_name,
            "position": self.position,
            "salary": f"{self.salary:.2f}",
            "role": self.role.value,
            "join_date": self.join_date.isoformat(),
            "phone": self.phone,
            "address": self.address,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
        }
