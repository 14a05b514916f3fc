from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..common.datetime_utils import local_day, now_utc, parse_iso_date
from ..common.validators import require_admin, require_enum, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import (
    AuthorizationError,
    DuplicateKeyError,
    DuplicateLeave,
    EmployeeNotFound,
    NotOwner,
    NotPending,
    RecordNotFound,
    UpdateConflict,
    ValidationError,
)
from ..employees.repository import EmployeeRepository
from .model import LeaveListRow, LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]

DECISIONS = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})


def _as_date(value: DateLike, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(value)
    except ValidationError:
        raise ValidationError(f"{field_name} is not a valid date (YYYY-MM-DD)")


class LeaveService:
    """Leave lifecycle: PENDING -> APPROVED | REJECTED.

    At most one request per (employee, start_date) exists, whatever its status.
    """

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, *, allow_self_approval: bool = False):
        self._leaves = leaves
        self._employees = employees
        self._allow_self_approval = bool(allow_self_approval)

    def apply(
        self,
        *,
        employee_id: int,
        leave_type: Union[LeaveType, str],
        start_date: DateLike,
        reason: str,
        end_date: DateLike = None,
        today: Optional[date] = None,
    ) -> LeaveRequest:
        employee_id = int(employee_id)
        leave_type = require_enum(LeaveType, leave_type, "Leave type")
        start = _as_date(start_date, "Start date")
        if start is None:
            raise ValidationError("Start date is required")
        reason = require_non_empty(reason, "Reason")
        end = _as_date(end_date, "End date") or start

        today = today or local_day(now_utc())
        if start < today:
            raise ValidationError("Start date cannot be in the past")
        if end < start:
            raise ValidationError("End date must be on or after start date")

        if not self._employees.get_by_id(employee_id):
            raise EmployeeNotFound(employee_id)

        self._ensure_no_duplicate(employee_id, start)

        try:
            leave_id = self._leaves.create(
                employee_id=employee_id,
                leave_type=leave_type,
                start_date=start,
                end_date=end,
                reason=reason,
            )
        except DuplicateKeyError:
            self._ensure_no_duplicate(employee_id, start)
            raise UpdateConflict("A leave application for this date was just submitted, please refresh")

        logger.info("Employee %s applied for %s leave on %s", employee_id, leave_type.value, start)
        return self._get(leave_id)

    def decide(
        self,
        *,
        caller_role: Role,
        approver_id: int,
        leave_id: int,
        decision: Union[LeaveStatus, str],
    ) -> LeaveRequest:
        require_admin(caller_role)
        status = require_enum(LeaveStatus, decision, "Decision")
        if status not in DECISIONS:
            raise ValidationError("Decision must be approved or rejected")

        req = self._get(int(leave_id))
        if not req.is_pending:
            raise NotPending(req.status.value)
        if req.employee_id == int(approver_id) and not self._allow_self_approval:
            raise AuthorizationError("You cannot decide your own leave request")

        ok = self._leaves.decide(
            leave_id=req.leave_id,
            status=status,
            approved_by=int(approver_id),
            decided_at=now_utc(),
        )
        if not ok:
            # Someone else decided it between our read and write.
            raise NotPending(self._get(req.leave_id).status.value)

        logger.info("Leave %s %s by %s", req.leave_id, status.value, approver_id)
        return self._get(req.leave_id)

    def approve(self, *, caller_role: Role, approver_id: int, leave_id: int) -> LeaveRequest:
        return self.decide(caller_role=caller_role, approver_id=approver_id, leave_id=leave_id, decision=LeaveStatus.APPROVED)

    def reject(self, *, caller_role: Role, approver_id: int, leave_id: int) -> LeaveRequest:
        return self.decide(caller_role=caller_role, approver_id=approver_id, leave_id=leave_id, decision=LeaveStatus.REJECTED)

    def withdraw(self, *, leave_id: int, requester_id: int) -> None:
        req = self._get(int(leave_id))
        if req.employee_id != int(requester_id):
            raise NotOwner()
        if not req.is_pending:
            raise NotPending(req.status.value)

        if not self._leaves.delete_pending(leave_id=req.leave_id, employee_id=req.employee_id):
            raise NotPending(self._get(req.leave_id).status.value)
        logger.info("Leave %s withdrawn by employee %s", req.leave_id, requester_id)

    def list_leaves(
        self,
        *,
        caller_id: int,
        caller_role: Role,
        employee_id: Optional[int] = None,
        status: Union[LeaveStatus, str, None] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveListRow]:
        if caller_role != Role.ADMIN:
            if employee_id is not None and int(employee_id) != int(caller_id):
                raise AuthorizationError("You can only view your own leave requests")
            employee_id = int(caller_id)

        status_f = require_enum(LeaveStatus, status, "Status") if status else None
        return self._leaves.list_requests(
            employee_id=int(employee_id) if employee_id is not None else None,
            status=status_f,
            limit=limit,
        )

    def _ensure_no_duplicate(self, employee_id: int, start: date) -> None:
        existing = self._leaves.find_by_employee_and_start(employee_id, start)
        if existing:
            first = existing[0]
            logger.warning("Duplicate leave for employee %s on %s", employee_id, start)
            raise DuplicateLeave(leave_type=first.leave_type.value, status=first.status.value, start_date=start)

    def _get(self, leave_id: int) -> LeaveRequest:
        req = self._leaves.get_by_id(int(leave_id))
        if not req:
            raise RecordNotFound("Leave request", int(leave_id))
        return req
