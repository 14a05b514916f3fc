from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .calculator.base import PayrollFigures
from .model import PayrollListRow, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    p.payroll_id, p.employee_id, p.month, p.base_salary, p.late_days, p.late_deduction,
    p.leave_days_taken, p.leave_allowance, p.excess_leaves, p.leave_deduction,
    p.net_salary, p.status, p.generated_at, p.approved_at, p.paid_at
"""

_STAMP_COLUMN = {
    PayrollStatus.APPROVED: "approved_at",
    PayrollStatus.PAID: "paid_at",
}


def _to_record(row: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(row["payroll_id"]),
        employee_id=int(row["employee_id"]),
        month=row["month"],
        base_salary=Decimal(row["base_salary"]),
        late_days=int(row["late_days"]),
        late_deduction=Decimal(row["late_deduction"]),
        leave_days_taken=int(row["leave_days_taken"]),
        leave_allowance=int(row["leave_allowance"]),
        excess_leaves=int(row["excess_leaves"]),
        leave_deduction=Decimal(row["leave_deduction"]),
        net_salary=Decimal(row["net_salary"]),
        status=PayrollStatus(row["status"]),
        generated_at=row["generated_at"],
        approved_at=row.get("approved_at"),
        paid_at=row.get("paid_at"),
    )


def _to_row(row: dict) -> PayrollListRow:
    return PayrollListRow(record=_to_record(row), full_name=row["full_name"], position=row["position"])


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll p WHERE p.payroll_id=%s", (int(payroll_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_employee_month(self, employee_id: int, month: date) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll p WHERE p.employee_id=%s AND p.month=%s",
                (int(employee_id), month),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def create(self, *, employee_id: int, month: date, figures: PayrollFigures, generated_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll (
                    employee_id, month, base_salary, late_days, late_deduction,
                    leave_days_taken, leave_allowance, excess_leaves, leave_deduction,
                    net_salary, status, generated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    int(employee_id),
                    month,
                    figures.base_salary,
                    figures.late_days,
                    figures.late_deduction,
                    figures.leave_days_taken,
                    figures.leave_allowance,
                    figures.excess_leaves,
                    figures.leave_deduction,
                    figures.net_salary,
                    PayrollStatus.DRAFT.value,
                    generated_at,
                ),
            )
            return int(cur.lastrowid)

    def transition(
        self,
        *,
        payroll_id: int,
        from_status: PayrollStatus,
        to_status: PayrollStatus,
        at: datetime,
    ) -> bool:
        stamp = _STAMP_COLUMN[to_status]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll SET status=%s, {stamp}=%s WHERE payroll_id=%s AND status=%s",
                (to_status.value, at, int(payroll_id), from_status.value),
            )
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[PayrollListRow]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id is not None:
            clauses.append("p.employee_id=%s")
            params.append(int(employee_id))
        if month is not None:
            clauses.append("p.month=%s")
            params.append(month)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name, e.position
                FROM payroll p
                JOIN employees e ON e.employee_id = p.employee_id
                WHERE {build_where(clauses)}
                ORDER BY p.generated_at DESC, p.payroll_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def get_row(self, payroll_id: int) -> Optional[PayrollListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name, e.position
                FROM payroll p
                JOIN employees e ON e.employee_id = p.employee_id
                WHERE p.payroll_id=%s
                """,
                (int(payroll_id),),
            )
            row = fetchone(cur)
            return _to_row(row) if row else None
