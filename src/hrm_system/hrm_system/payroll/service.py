from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, month_dates, now_utc, parse_month
from ..common.validators import require_admin
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import PayrollStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    DuplicateKeyError,
    EmployeeNotFound,
    InvalidPayrollTransition,
    PayrollAlreadyExists,
    RecordNotFound,
)
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from .calculator.base import PayrollCalculator, PayrollInputs
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollListRow, PayrollRecord
from .payslip import PayslipView
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

MonthLike = Union[date, str]

# DRAFT -> APPROVED -> PAID; nothing moves backwards or repeats.
_NEXT_STATUS = {
    PayrollStatus.DRAFT: PayrollStatus.APPROVED,
    PayrollStatus.APPROVED: PayrollStatus.PAID,
}


def _as_month(value: MonthLike) -> date:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.replace(day=1)
    return parse_month(value)


@dataclass
class BatchResult:
    month: date
    generated: list[PayrollRecord] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "month": self.month.strftime("%Y-%m"),
            "generated": [r.to_dict() for r in self.generated],
            "skipped_employee_ids": list(self.skipped),
        }


class PayrollService:
    """Generate, approve and pay monthly payroll.

    The existence pre-check only gives a precise message; the storage-level
    unique key on (employee_id, month) is what prevents double generation.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._calculator = calculator or StandardPayrollCalculator()

    def generate(self, *, caller_role: Role, employee_id: int, month: MonthLike) -> PayrollRecord:
        require_admin(caller_role)
        employee_id = int(employee_id)
        month = _as_month(month)

        if self._payroll.get_for_employee_month(employee_id, month):
            logger.warning("Payroll %s for employee %s already exists", month, employee_id)
            raise PayrollAlreadyExists(employee_id=employee_id, month=month)

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound(employee_id)

        window_start, window_end = month_bounds(month)
        late_count = self._attendance.count_late_between(employee_id, window_start, window_end)

        first_day, last_day = month_dates(month)
        leave_days = self._leaves.count_approved_starting_between(employee_id, first_day, last_day)

        figures = self._calculator.compute(
            PayrollInputs(base_salary=employee.salary, late_count=late_count, leave_days=leave_days)
        )

        try:
            payroll_id = self._payroll.create(
                employee_id=employee_id,
                month=month,
                figures=figures,
                generated_at=now_utc(),
            )
        except DuplicateKeyError:
            raise PayrollAlreadyExists(employee_id=employee_id, month=month)

        logger.info(
            "Payroll %s generated for employee %s: net=%s (late=%s, leave=%s)",
            month.strftime("%Y-%m"),
            employee_id,
            figures.net_salary,
            late_count,
            leave_days,
        )
        return self._get(payroll_id)

    def generate_for_all(self, *, caller_role: Role, month: MonthLike) -> BatchResult:
        """Generate for every employee; existing records are skipped, not failed."""

        require_admin(caller_role)
        result = BatchResult(month=_as_month(month))
        for employee in self._employees.list():
            try:
                result.generated.append(
                    self.generate(caller_role=caller_role, employee_id=employee.employee_id, month=result.month)
                )
            except PayrollAlreadyExists:
                result.skipped.append(employee.employee_id)
        return result

    def approve(self, *, caller_role: Role, payroll_id: int) -> PayrollRecord:
        require_admin(caller_role)
        return self._advance(int(payroll_id), PayrollStatus.APPROVED)

    def mark_paid(self, *, caller_role: Role, payroll_id: int) -> PayrollRecord:
        require_admin(caller_role)
        return self._advance(int(payroll_id), PayrollStatus.PAID)

    def list_payroll(
        self,
        *,
        caller_id: int,
        caller_role: Role,
        employee_id: Optional[int] = None,
        month: Optional[MonthLike] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[PayrollListRow]:
        if caller_role != Role.ADMIN:
            if employee_id is not None and int(employee_id) != int(caller_id):
                raise AuthorizationError("You can only view your own payroll")
            employee_id = int(caller_id)

        return self._payroll.list_records(
            employee_id=int(employee_id) if employee_id is not None else None,
            month=_as_month(month) if month else None,
            limit=limit,
        )

    def get_payslip(self, *, caller_id: int, caller_role: Role, employee_id: int, month: MonthLike) -> PayslipView:
        month = _as_month(month)
        rows = self.list_payroll(caller_id=caller_id, caller_role=caller_role, employee_id=employee_id, month=month, limit=1)
        if not rows:
            raise RecordNotFound("Payslip", f"{int(employee_id)}/{month:%Y-%m}")
        return PayslipView.from_row(rows[0])

    def get_payslip_by_id(self, *, caller_id: int, caller_role: Role, payroll_id: int) -> PayslipView:
        row = self._payroll.get_row(int(payroll_id))
        if not row:
            raise RecordNotFound("Payroll", int(payroll_id))
        if caller_role != Role.ADMIN and row.record.employee_id != int(caller_id):
            raise AuthorizationError("You can only view your own payslip")
        return PayslipView.from_row(row)

    def _advance(self, payroll_id: int, target: PayrollStatus) -> PayrollRecord:
        record = self._get(payroll_id)
        if _NEXT_STATUS.get(record.status) != target:
            raise InvalidPayrollTransition(current=record.status.value, target=target.value)

        ok = self._payroll.transition(payroll_id=payroll_id, from_status=record.status, to_status=target, at=now_utc())
        if not ok:
            current = self._get(payroll_id)
            raise InvalidPayrollTransition(current=current.status.value, target=target.value)

        logger.info("Payroll %s moved %s -> %s", payroll_id, record.status.value, target.value)
        return self._get(payroll_id)

    def _get(self, payroll_id: int) -> PayrollRecord:
        record = self._payroll.get_by_id(int(payroll_id))
        if not record:
            raise RecordNotFound("Payroll", int(payroll_id))
        return record
