from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import LeaveListRow, LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    l.leave_id, l.employee_id, l.leave_type, l.start_date, l.end_date, l.reason,
    l.status, l.created_at, l.approved_by, l.decided_at
"""


def _to_leave(row: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(row["leave_id"]),
        employee_id=int(row["employee_id"]),
        leave_type=LeaveType(row["leave_type"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        reason=row["reason"],
        status=LeaveStatus(row["status"]),
        created_at=row["created_at"],
        approved_by=row.get("approved_by"),
        decided_at=row.get("decided_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leaves l WHERE l.leave_id=%s", (int(leave_id),))
            row = fetchone(cur)
            return _to_leave(row) if row else None

    def find_by_employee_and_start(self, employee_id: int, start_date: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leaves l WHERE l.employee_id=%s AND l.start_date=%s",
                (int(employee_id), start_date),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves (employee_id, leave_type, start_date, end_date, reason, status)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (int(employee_id), leave_type.value, start_date, end_date, reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def decide(self, *, leave_id: int, status: LeaveStatus, approved_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, decided_at=%s, updated_at=%s
                WHERE leave_id=%s AND status=%s
                """,
                (status.value, int(approved_by), decided_at, decided_at, int(leave_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def delete_pending(self, *, leave_id: int, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leaves WHERE leave_id=%s AND employee_id=%s AND status=%s",
                (int(leave_id), int(employee_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveListRow]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id is not None:
            clauses.append("l.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("l.status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name, e.position, a.full_name AS approver_name
                FROM leaves l
                JOIN employees e ON e.employee_id = l.employee_id
                LEFT JOIN employees a ON a.employee_id = l.approved_by
                WHERE {build_where(clauses)}
                ORDER BY l.created_at DESC, l.leave_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [
                LeaveListRow(
                    request=_to_leave(r),
                    full_name=r["full_name"],
                    position=r["position"],
                    approver_name=r.get("approver_name"),
                )
                for r in fetchall(cur)
            ]

    def count_approved_starting_between(self, employee_id: int, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM leaves
                WHERE employee_id=%s AND status=%s AND start_date >= %s AND start_date <= %s
                """,
                (int(employee_id), LeaveStatus.APPROVED.value, start, end),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
