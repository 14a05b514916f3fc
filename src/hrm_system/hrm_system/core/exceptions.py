from __future__ import annotations

from datetime import date
from typing import Any, Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass pins a single ``kind`` so callers can branch on a closed
    set of error kinds instead of parsing messages.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        out.update(self.details())
        return out


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = ErrorKind.VALIDATION


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    kind = ErrorKind.AUTHORIZATION


# -------- Conflicts (invariant violations found by a pre-check) --------
class ConflictError(DomainError):
    pass


class AlreadyCheckedIn(ConflictError):
    kind = ErrorKind.ALREADY_CHECKED_IN

    def __init__(self, message: str = "Already checked in today"):
        super().__init__(message)


class AlreadyCheckedOut(ConflictError):
    kind = ErrorKind.ALREADY_CHECKED_OUT

    def __init__(self, message: str = "Already checked out today"):
        super().__init__(message)


class DuplicateLeave(ConflictError):
    kind = ErrorKind.DUPLICATE_LEAVE

    def __init__(self, *, leave_type: str, status: str, start_date: date):
        super().__init__(
            f"You already have a {leave_type} leave application for this date (Status: {status})"
        )
        self.leave_type = leave_type
        self.status = status
        self.start_date = start_date

    def details(self) -> dict[str, Any]:
        return {
            "leave_type": self.leave_type,
            "status": self.status,
            "start_date": self.start_date.isoformat(),
        }


class PayrollAlreadyExists(ConflictError):
    kind = ErrorKind.PAYROLL_ALREADY_EXISTS

    def __init__(self, *, employee_id: int, month: date):
        super().__init__(f"Payroll for {month:%Y-%m} already exists for employee {employee_id}")
        self.employee_id = employee_id
        self.month = month

    def details(self) -> dict[str, Any]:
        return {"employee_id": self.employee_id, "month": self.month.strftime("%Y-%m")}


class UpdateConflict(ConflictError):
    kind = ErrorKind.UPDATE_CONFLICT

    def __init__(self, message: str = "Update affected no rows, please refresh and retry"):
        super().__init__(message)


class EmployeeHasRecords(ConflictError):
    kind = ErrorKind.EMPLOYEE_HAS_RECORDS

    def __init__(self, employee_id: int):
        super().__init__("Employee has attendance, leave or payroll records and cannot be deleted")
        self.employee_id = employee_id

    def details(self) -> dict[str, Any]:
        return {"employee_id": self.employee_id}


# -------- Not found --------
class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class NoActiveCheckIn(NotFoundError):
    kind = ErrorKind.NO_ACTIVE_CHECK_IN

    def __init__(self, message: str = "No active check-in found. Please refresh."):
        super().__init__(message)


class EmployeeNotFound(NotFoundError):
    kind = ErrorKind.EMPLOYEE_NOT_FOUND

    def __init__(self, employee_id: int):
        super().__init__("Employee not found")
        self.employee_id = employee_id

    def details(self) -> dict[str, Any]:
        return {"employee_id": self.employee_id}


class RecordNotFound(NotFoundError):
    def __init__(self, entity: str, record_id: Any):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.record_id = record_id

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "record_id": self.record_id}


# -------- Illegal state transitions --------
class StateError(DomainError):
    pass


class NotPending(StateError):
    kind = ErrorKind.NOT_PENDING

    def __init__(self, status: str):
        super().__init__(f"Leave request is already {status}")
        self.status = status

    def details(self) -> dict[str, Any]:
        return {"status": self.status}


class NotOwner(StateError):
    kind = ErrorKind.NOT_OWNER

    def __init__(self, message: str = "Only the owner can withdraw this leave request"):
        super().__init__(message)


class InvalidPayrollTransition(StateError):
    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, *, current: str, target: str):
        super().__init__(f"Payroll cannot move from {current} to {target}")
        self.current = current
        self.target = target

    def details(self) -> dict[str, Any]:
        return {"current": self.current, "target": self.target}


# -------- Store --------
class StoreError(DomainError):
    """Opaque failure from the data store (network, permission, driver)."""

    kind = ErrorKind.STORE

    def __init__(self, message: str = "Data store error", *, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno


class DuplicateKeyError(StoreError):
    """A storage-level uniqueness constraint rejected a write."""

    kind = ErrorKind.DUPLICATE_KEY


class ReferencedRecordError(StoreError):
    """A foreign key from another row blocked a delete."""

    kind = ErrorKind.REFERENCED_RECORD
