from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for access checks."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class LeaveType(str, Enum):
    SICK = "sick"
    CASUAL = "casual"
    ANNUAL = "annual"
    EMERGENCY = "emergency"


class LeaveStatus(str, Enum):
    """Leave workflow: PENDING -> APPROVED | REJECTED (terminal)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PayrollStatus(str, Enum):
    """Payroll workflow: DRAFT -> APPROVED -> PAID."""

    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"


class CheckInRepeatPolicy(str, Enum):
    """What a check-in does when today's record is already checked out."""

    REOPEN = "reopen"
    REJECT = "reject"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    ALREADY_CHECKED_IN = "already_checked_in"
    ALREADY_CHECKED_OUT = "already_checked_out"
    DUPLICATE_LEAVE = "duplicate_leave"
    PAYROLL_ALREADY_EXISTS = "payroll_already_exists"
    UPDATE_CONFLICT = "update_conflict"
    EMPLOYEE_HAS_RECORDS = "employee_has_records"
    NO_ACTIVE_CHECK_IN = "no_active_check_in"
    EMPLOYEE_NOT_FOUND = "employee_not_found"
    NOT_FOUND = "not_found"
    NOT_PENDING = "not_pending"
    NOT_OWNER = "not_owner"
    INVALID_TRANSITION = "invalid_transition"
    STORE = "store"
    DUPLICATE_KEY = "duplicate_key"
    REFERENCED_RECORD = "referenced_record"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
