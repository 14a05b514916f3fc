"""Payslip projection and PDF export.

The view is a read-only projection of a payroll record plus the employee's
name and position; it does no arithmetic of its own.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.money import format_currency
from .model import PayrollListRow, PayrollRecord


@dataclass(frozen=True)
class PayslipView:
    record: PayrollRecord
    full_name: str
    position: str

    @classmethod
    def from_row(cls, row: PayrollListRow) -> "PayslipView":
        return cls(record=row.record, full_name=row.full_name, position=row.position)

    @property
    def month_label(self) -> str:
        return self.record.month.strftime("%Y-%m")

    def header_lines(self, *, generated_on: Optional[date] = None) -> list[tuple[str, str]]:
        generated = generated_on or self.record.generated_at.date()
        return [
            ("Employee", self.full_name),
            ("Position", self.position),
            ("Month", self.month_label),
            ("Generated", generated.isoformat()),
        ]

    def amount_lines(self) -> list[tuple[str, str]]:
        r = self.record
        return [
            ("Base Salary", format_currency(r.base_salary)),
            (f"Late Deduction ({r.late_days} late days)", f"- {format_currency(r.late_deduction)}"),
            (f"Excess Leave Deduction ({r.excess_leaves} days)", f"- {format_currency(r.leave_deduction)}"),
        ]

    def net_line(self) -> tuple[str, str]:
        return ("Net Salary", format_currency(self.record.net_salary))

    def footer_line(self) -> str:
        r = self.record
        approved = r.approved_at.date().isoformat() if r.approved_at else "-"
        return f"Status: {r.status.value.upper()}    Approved on: {approved}"

    def to_dict(self) -> dict:
        out = self.record.to_dict()
        out.update({"full_name": self.full_name, "position": self.position})
        return out

    def filename(self) -> str:
        return f"payslip_{self.record.employee_id}_{self.month_label}.pdf"


def render_payslip_pdf(view: PayslipView, *, generated_on: Optional[date] = None) -> bytes:
    """Render the fixed payslip layout to PDF bytes."""

    output = io.BytesIO()
    doc = SimpleDocTemplate(output, pagesize=A4, title=f"Payslip {view.month_label}")
    styles = getSampleStyleSheet()

    elements = [Paragraph("Payslip", styles["Title"]), Spacer(1, 12)]

    header = Table(view.header_lines(generated_on=generated_on), colWidths=[120, 300])
    header.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    elements.extend([header, Spacer(1, 18)])

    body_rows = view.amount_lines() + [view.net_line()]
    body = Table(body_rows, colWidths=[300, 140])
    body.setStyle(
        TableStyle(
            [
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("BACKGROUND", (0, -1), (-1, -1), colors.lightgrey),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ]
        )
    )
    elements.extend([body, Spacer(1, 24), Paragraph(view.footer_line(), styles["Normal"])])

    doc.build(elements)
    return output.getvalue()
