from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .calculator.base import PayrollFigures
from .model import PayrollListRow, PayrollRecord


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_for_employee_month(self, employee_id: int, month: date) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(self, *, employee_id: int, month: date, figures: PayrollFigures, generated_at: datetime) -> int:
        """Insert a DRAFT record. (employee_id, month) is unique in storage."""

        raise NotImplementedError

    def transition(
        self,
        *,
        payroll_id: int,
        from_status: PayrollStatus,
        to_status: PayrollStatus,
        at: datetime,
    ) -> bool:
        """Compare-and-set the status and stamp the matching timestamp."""

        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[PayrollListRow]:
        """Newest generated first."""

        raise NotImplementedError

    def get_row(self, payroll_id: int) -> Optional[PayrollListRow]:
        raise NotImplementedError
