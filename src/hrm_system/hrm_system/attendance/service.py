from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import (
    hours_between,
    local_day,
    local_day_bounds,
    local_range_bounds,
    now_utc,
    to_local,
)
from ..common.validators import require_admin
from ..core.constants import DEFAULT_LIST_LIMIT, ROSTER_RECORD_LIMIT
from ..core.enums import CheckInRepeatPolicy, Role
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AuthorizationError,
    DuplicateKeyError,
    EmployeeNotFound,
    NoActiveCheckIn,
    StoreError,
    UpdateConflict,
    ValidationError,
)
from ..employees.repository import EmployeeRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceListRow, AttendanceRecord, RosterReport, RosterRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Per employee per local day: NoRecord -> CheckedIn -> CheckedOut.

    The local day boundary is midnight at UTC+5. What a check-in does on a
    day that is already CheckedOut depends on ``repeat_policy``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        repeat_policy: CheckInRepeatPolicy = CheckInRepeatPolicy.REOPEN,
    ):
        self._attendance = attendance
        self._employees = employees
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._repeat_policy = CheckInRepeatPolicy(repeat_policy)

    def check_in(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_utc()
        employee_id = int(employee_id)
        today = local_day(now)
        start, end = local_day_bounds(today)

        if not self._employees.get_by_id(employee_id):
            raise EmployeeNotFound(employee_id)

        existing = self._attendance.get_for_employee_between(employee_id, start, end)
        if existing and existing.is_open:
            logger.warning("Employee %s tried to check in twice on %s", employee_id, today)
            raise AlreadyCheckedIn()

        strategy = self._factory.for_checkin(now=now)
        decision = strategy.decide_checkin(now=now, local_now=to_local(now))

        if existing:
            if self._repeat_policy == CheckInRepeatPolicy.REJECT:
                logger.warning("Employee %s tried to check in after checking out on %s", employee_id, today)
                raise AlreadyCheckedOut()
            if not self._attendance.reopen(attendance_id=existing.attendance_id, check_in=now, is_late=decision.is_late):
                raise UpdateConflict()
            attendance_id = existing.attendance_id
            logger.info("Employee %s reopened attendance %s on %s", employee_id, attendance_id, today)
        else:
            try:
                attendance_id = self._attendance.create_check_in(
                    employee_id=employee_id,
                    work_date=today,
                    check_in=now,
                    is_late=decision.is_late,
                )
            except DuplicateKeyError:
                # Lost a race with a concurrent check-in for the same day.
                raise AlreadyCheckedIn()
            logger.info("Employee %s checked in on %s (late=%s)", employee_id, today, decision.is_late)

        if decision.note:
            logger.info("Employee %s: %s", employee_id, decision.note)

        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise StoreError("Attendance record vanished after check-in")
        return record

    def check_out(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_utc()
        employee_id = int(employee_id)
        start, end = local_day_bounds(local_day(now))

        record = self._attendance.get_open_for_employee_between(employee_id, start, end)
        if not record:
            logger.warning("Employee %s has no open check-in to close", employee_id)
            raise NoActiveCheckIn()

        hours = hours_between(record.check_in, now)
        if not self._attendance.update_check_out(attendance_id=record.attendance_id, check_out=now, hours_worked=hours):
            raise UpdateConflict()

        logger.info("Employee %s checked out (%s h)", employee_id, hours)
        return replace(record, check_out=now, hours_worked=hours)

    def get_today_record(self, employee_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        start, end = local_day_bounds(local_day(now or now_utc()))
        return self._attendance.get_for_employee_between(int(employee_id), start, end)

    def list_attendance(
        self,
        *,
        caller_id: int,
        caller_role: Role,
        employee_id: Optional[int] = None,
        start_day: Optional[date] = None,
        end_day: Optional[date] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[AttendanceListRow]:
        """List records whose check-in falls in the local day range (inclusive)."""

        if caller_role != Role.ADMIN:
            if employee_id is not None and int(employee_id) != int(caller_id):
                raise AuthorizationError("You can only view your own attendance")
            employee_id = int(caller_id)
            search = None

        if start_day and end_day and end_day < start_day:
            raise ValidationError("End date must be on or after start date")

        start, end = local_range_bounds(start_day, end_day)
        return self._attendance.list_records(
            employee_id=employee_id,
            start=start,
            end=end,
            search=(search or "").strip() or None,
            limit=limit,
        )

    def daily_roster(
        self,
        *,
        caller_role: Role,
        day: date,
        search: Optional[str] = None,
        position: Optional[str] = None,
    ) -> RosterReport:
        """Present/absent roster of every (filtered) employee for one local day."""

        require_admin(caller_role)
        employees = self._employees.list(search=(search or "").strip() or None, position=(position or "").strip() or None)
        start, end = local_day_bounds(day)
        records = self._attendance.list_records(start=start, end=end, limit=ROSTER_RECORD_LIMIT)

        by_employee: dict[int, AttendanceRecord] = {}
        for row in records:
            by_employee.setdefault(row.record.employee_id, row.record)

        rows: list[RosterRow] = []
        for emp in employees:
            rec = by_employee.get(emp.employee_id)
            rows.append(
                RosterRow(
                    employee_id=emp.employee_id,
                    full_name=emp.full_name,
                    position=emp.position,
                    status="Present" if rec else "Absent",
                    check_in=to_local(rec.check_in).strftime("%H:%M:%S") if rec else "-",
                    check_out=to_local(rec.check_out).strftime("%H:%M:%S") if rec and rec.check_out else "-",
                    hours_worked=f"{rec.hours_worked:.2f}" if rec else "0.00",
                    is_late="Yes" if rec and rec.is_late else "No",
                )
            )

        present = sum(1 for r in rows if r.status == "Present")
        return RosterReport(
            day=day,
            rows=rows,
            total=len(rows),
            present=present,
            absent=len(rows) - present,
            late=sum(1 for r in rows if r.is_late == "Yes"),
        )
