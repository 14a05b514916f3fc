from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PayrollInputs:
    base_salary: Decimal
    late_count: int
    leave_days: int


@dataclass(frozen=True)
class PayrollFigures:
    base_salary: Decimal
    late_days: int
    late_deduction: Decimal
    leave_days_taken: int
    leave_allowance: int
    excess_leaves: int
    leave_deduction: Decimal
    net_salary: Decimal


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute(self, inputs: PayrollInputs) -> PayrollFigures:
        raise NotImplementedError
