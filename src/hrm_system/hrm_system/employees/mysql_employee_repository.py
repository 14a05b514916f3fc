from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, email, password_hash, full_name, position, salary, role,
    join_date, phone, address, date_of_birth
"""

_UPDATABLE = {"full_name", "phone", "address", "date_of_birth", "position", "salary", "role", "join_date"}


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        email=row["email"],
        full_name=row["full_name"],
        position=row["position"],
        salary=Decimal(row["salary"]),
        role=Role(row["role"]),
        join_date=row["join_date"],
        phone=row.get("phone"),
        address=row.get("address"),
        date_of_birth=row.get("date_of_birth"),
        password_hash=row.get("password_hash") or "",
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees (email, password_hash, full_name, position, salary, role, join_date)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (email, password_hash, full_name, position, salary, role.value, join_date),
            )
            return int(cur.lastrowid)

    def list(self, *, search: Optional[str] = None, position: Optional[str] = None) -> Sequence[Employee]:
        clauses: list[str] = []
        params: list[object] = []
        if search:
            clauses.append("LOWER(full_name) LIKE %s")
            params.append(f"%{search.lower()}%")
        if position:
            clauses.append("position=%s")
            params.append(position)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {build_where(clauses)} ORDER BY full_name",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def update_fields(self, employee_id: int, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported employee columns: {sorted(unknown)}")
        if not fields:
            return

        assignments = [f"{col}=%s" for col in fields]
        params = [v.value if isinstance(v, Role) else v for v in fields.values()]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET {', '.join(assignments)}, updated_at=UTC_TIMESTAMP() WHERE employee_id=%s",
                tuple(params + [int(employee_id)]),
            )

    def has_dependent_records(self, employee_id: int) -> bool:
        eid = int(employee_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    EXISTS(SELECT 1 FROM attendance WHERE employee_id=%s)
                    OR EXISTS(SELECT 1 FROM leaves WHERE employee_id=%s OR approved_by=%s)
                    OR EXISTS(SELECT 1 FROM payroll WHERE employee_id=%s) AS has_records
                """,
                (eid, eid, eid, eid),
            )
            row = fetchone(cur)
            return bool(row and row["has_records"])

    def delete(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
