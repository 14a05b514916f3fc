from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveListRow, LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_by_employee_and_start(self, employee_id: int, start_date: date) -> Sequence[LeaveRequest]:
        """Every request (any status) for this employee starting on ``start_date``."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def decide(self, *, leave_id: int, status: LeaveStatus, approved_by: int, decided_at: datetime) -> bool:
        """Move a PENDING request to ``status``. Returns False when no row changed."""

        raise NotImplementedError

    def delete_pending(self, *, leave_id: int, employee_id: int) -> bool:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveListRow]:
        """Newest first."""

        raise NotImplementedError

    def count_approved_starting_between(self, employee_id: int, start: date, end: date) -> int:
        """Approved requests with ``start <= start_date <= end``."""

        raise NotImplementedError
