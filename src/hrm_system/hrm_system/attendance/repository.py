from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import AttendanceListRow, AttendanceRecord


class AttendanceRepository(Protocol):
    """Time windows are naive UTC, half-open ``[start, end)``."""

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_between(self, employee_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_for_employee_between(
        self, employee_id: int, start: datetime, end: datetime
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_check_in(self, *, employee_id: int, work_date: date, check_in: datetime, is_late: bool) -> int:
        raise NotImplementedError

    def reopen(self, *, attendance_id: int, check_in: datetime, is_late: bool) -> bool:
        """Overwrite a completed record with a fresh check-in (clears check-out)."""

        raise NotImplementedError

    def update_check_out(self, *, attendance_id: int, check_out: datetime, hours_worked: Decimal) -> bool:
        """Set check-out only if still open. Returns False when no row changed."""

        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceListRow]:
        """Newest check-in first."""

        raise NotImplementedError

    def count_late_between(self, employee_id: int, start: datetime, end: datetime) -> int:
        """Late check-ins with ``start <= check_in <= end`` (inclusive)."""

        raise NotImplementedError
