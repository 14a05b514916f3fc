from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import AttendanceListRow, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "a.attendance_id, a.employee_id, a.work_date, a.check_in, a.check_out, a.is_late, a.hours_worked"


def _to_record(row: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        employee_id=int(row["employee_id"]),
        work_date=row["work_date"],
        check_in=row["check_in"],
        check_out=row.get("check_out"),
        is_late=bool(row["is_late"]),
        hours_worked=Decimal(row.get("hours_worked") or 0),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance a WHERE a.attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_employee_between(self, employee_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance a
                WHERE a.employee_id=%s AND a.check_in >= %s AND a.check_in < %s
                ORDER BY a.check_in DESC
                LIMIT 1
                """,
                (int(employee_id), start, end),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_open_for_employee_between(
        self, employee_id: int, start: datetime, end: datetime
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance a
                WHERE a.employee_id=%s AND a.check_in >= %s AND a.check_in < %s AND a.check_out IS NULL
                ORDER BY a.check_in DESC
                LIMIT 1
                """,
                (int(employee_id), start, end),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def create_check_in(self, *, employee_id: int, work_date: date, check_in: datetime, is_late: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance (employee_id, work_date, check_in, is_late, hours_worked)
                VALUES (%s, %s, %s, %s, 0)
                """,
                (int(employee_id), work_date, check_in, int(bool(is_late))),
            )
            return int(cur.lastrowid)

    def reopen(self, *, attendance_id: int, check_in: datetime, is_late: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_in=%s, check_out=NULL, is_late=%s, hours_worked=0
                WHERE attendance_id=%s AND check_out IS NOT NULL
                """,
                (check_in, int(bool(is_late)), int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_check_out(self, *, attendance_id: int, check_out: datetime, hours_worked: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out=%s, hours_worked=%s
                WHERE attendance_id=%s AND check_out IS NULL
                """,
                (check_out, hours_worked, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceListRow]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(int(employee_id))
        if start is not None:
            clauses.append("a.check_in >= %s")
            params.append(start)
        if end is not None:
            clauses.append("a.check_in < %s")
            params.append(end)
        if search:
            clauses.append("LOWER(e.full_name) LIKE %s")
            params.append(f"%{search.lower()}%")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name
                FROM attendance a
                JOIN employees e ON e.employee_id = a.employee_id
                WHERE {build_where(clauses)}
                ORDER BY a.check_in DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [AttendanceListRow(record=_to_record(r), full_name=r["full_name"]) for r in fetchall(cur)]

    def count_late_between(self, employee_id: int, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM attendance
                WHERE employee_id=%s AND is_late=1 AND check_in >= %s AND check_in <= %s
                """,
                (int(employee_id), start, end),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
