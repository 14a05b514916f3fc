from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import to_local


def _fmt_instant(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _fmt_local_time(value: Optional[datetime]) -> str:
    return to_local(value).strftime("%H:%M:%S") if value else "-"


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in/check-out pair for an employee's local work day.

    ``check_in``/``check_out`` are naive UTC instants; ``work_date`` is the
    UTC+5 local day of ``check_in``. ``is_late`` and ``hours_worked`` are
    written once at check-in/check-out and never recomputed.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: datetime
    check_out: Optional[datetime]
    is_late: bool
    hours_worked: Decimal = Decimal("0.00")

    @property
    def is_open(self) -> bool:
        return self.check_out is None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "check_in": _fmt_instant(self.check_in),
            "check_out": _fmt_instant(self.check_out),
            "check_in_local": _fmt_local_time(self.check_in),
            "check_out_local": _fmt_local_time(self.check_out),
            "is_late": self.is_late,
            "hours_worked": f"{self.hours_worked:.2f}",
        }


@dataclass(frozen=True)
class AttendanceListRow:
    """Read-model for attendance listings (joined with the employee name)."""

    record: AttendanceRecord
    full_name: str

    def to_dict(self) -> dict:
        out = self.record.to_dict()
        out["full_name"] = self.full_name
        return out


@dataclass(frozen=True)
class RosterRow:
    """Read-model for the admin daily roster: one row per employee."""

    employee_id: int
    full_name: str
    position: str
    status: str
    check_in: str
    check_out: str
    hours_worked: str
    is_late: str

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "full_name": self.full_name,
            "position": self.position,
            "status": self.status,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "hours_worked": self.hours_worked,
            "is_late": self.is_late,
        }


@dataclass(frozen=True)
class RosterReport:
    day: date
    rows: list[RosterRow]
    total: int
    present: int
    absent: int
    late: int

    def summary(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
        }
