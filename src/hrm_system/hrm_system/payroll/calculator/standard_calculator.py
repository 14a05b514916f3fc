from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ...common.money import round2, to_decimal
from ...core.constants import LATE_DEDUCTION_RATE, LEAVE_DEDUCTION_RATE, MONTHLY_LEAVE_ALLOWANCE
from .base import PayrollCalculator, PayrollFigures, PayrollInputs


@dataclass(frozen=True)
class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule.

    - each late day costs ``late_rate`` of base salary
    - the first ``leave_allowance`` approved leave days are free, each further
      day costs ``leave_rate`` of base salary
    - net = base - late deduction - leave deduction

    Money is rounded to 2 decimals; net is computed from the rounded deductions
    so the payslip lines always add up.
    """

    late_rate: Decimal = LATE_DEDUCTION_RATE
    leave_rate: Decimal = LEAVE_DEDUCTION_RATE
    leave_allowance: int = MONTHLY_LEAVE_ALLOWANCE

    def compute(self, inputs: PayrollInputs) -> PayrollFigures:
        base = to_decimal(inputs.base_salary)
        late_count = max(int(inputs.late_count), 0)
        leave_days = max(int(inputs.leave_days), 0)
        excess = max(0, leave_days - self.leave_allowance)

        late_deduction = round2(late_count * (base * self.late_rate))
        leave_deduction = round2(excess * (base * self.leave_rate))

        return PayrollFigures(
            base_salary=round2(base),
            late_days=late_count,
            late_deduction=late_deduction,
            leave_days_taken=leave_days,
            leave_allowance=self.leave_allowance,
            excess_leaves=excess,
            leave_deduction=leave_deduction,
            net_salary=round2(base - late_deduction - leave_deduction),
        )
