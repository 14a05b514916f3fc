from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    approved_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "leave_id": self.leave_id,
            "employee_id": self.employee_id,
            "type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class LeaveListRow:
    """Read-model for leave listings (joined with employee and approver)."""

    request: LeaveRequest
    full_name: str
    position: str
    approver_name: Optional[str] = None

    def to_dict(self) -> dict:
        out = self.request.to_dict()
        out.update(
            {
                "full_name": self.full_name,
                "position": self.position,
                "approver_name": self.approver_name,
            }
        )
        return out
