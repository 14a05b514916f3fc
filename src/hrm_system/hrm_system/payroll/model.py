from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PayrollStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class PayrollRecord:
    """One employee's payroll for one calendar month (``month`` is the 1st).

    Figures are fixed at generation time; afterwards only the status and its
    timestamps move.
    """

    payroll_id: int
    employee_id: int
    month: date
    base_salary: Decimal
    late_days: int
    late_deduction: Decimal
    leave_days_taken: int
    leave_allowance: int
    excess_leaves: int
    leave_deduction: Decimal
    net_salary: Decimal
    status: PayrollStatus
    generated_at: datetime
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "payroll_id": self.payroll_id,
            "employee_id": self.employee_id,
            "month": self.month.strftime("%Y-%m"),
            "base_salary": f"{self.base_salary:.2f}",
            "late_days": self.late_days,
            "late_deduction": f"{self.late_deduction:.2f}",
            "leave_days_taken": self.leave_days_taken,
            "leave_allowance": self.leave_allowance,
            "excess_leaves": self.excess_leaves,
            "leave_deduction": f"{self.leave_deduction:.2f}",
            "net_salary": f"{self.net_salary:.2f}",
            "status": self.status.value,
            "generated_at": _iso(self.generated_at),
            "approved_at": _iso(self.approved_at),
            "paid_at": _iso(self.paid_at),
        }


@dataclass(frozen=True)
class PayrollListRow:
    record: PayrollRecord
    full_name: str
    position: str

    def to_dict(self) -> dict:
        out = self.record.to_dict()
        out["full_name"] = self.full_name
        out["position"] = self.position
        return out
