from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.validators import require_int
from ..common.web import admin_required, current_user, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .payslip import render_payslip_pdf


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll/generate", methods=["POST"], endpoint="generate_payroll")
    @admin_required
    def generate_payroll():
        _, role = current_user()
        body = json_body()
        month = body.get("month")
        if not month:
            raise ValidationError("Month is required (YYYY-MM)")

        if body.get("employee_id") is None:
            result = container.payroll_service.generate_for_all(caller_role=role, month=month)
            return ok(result.to_dict(), reload=["payroll"])

        employee_id = require_int(body["employee_id"], "Employee id")
        record = container.payroll_service.generate(caller_role=role, employee_id=employee_id, month=month)
        return ok(record.to_dict(), reload=["payroll"], status=201)

    @app.route("/api/payroll", methods=["GET"], endpoint="list_payroll")
    @login_required
    def list_payroll():
        employee_id, role = current_user()
        rows = container.payroll_service.list_payroll(
            caller_id=employee_id,
            caller_role=role,
            employee_id=request.args.get("employee_id", type=int),
            month=request.args.get("month") or None,
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/payroll/<int:payroll_id>/approve", methods=["POST"], endpoint="approve_payroll")
    @admin_required
    def approve_payroll(payroll_id: int):
        _, role = current_user()
        record = container.payroll_service.approve(caller_role=role, payroll_id=payroll_id)
        return ok(record.to_dict(), reload=["payroll"])

    @app.route("/api/payroll/<int:payroll_id>/pay", methods=["POST"], endpoint="pay_payroll")
    @admin_required
    def pay_payroll(payroll_id: int):
        _, role = current_user()
        record = container.payroll_service.mark_paid(caller_role=role, payroll_id=payroll_id)
        return ok(record.to_dict(), reload=["payroll"])

    @app.route("/api/payroll/payslip", methods=["GET"], endpoint="my_payslip")
    @login_required
    def my_payslip():
        employee_id, role = current_user()
        month = request.args.get("month", "")
        view = container.payroll_service.get_payslip(
            caller_id=employee_id,
            caller_role=role,
            employee_id=request.args.get("employee_id", default=employee_id, type=int),
            month=month,
        )
        return ok(view.to_dict())

    @app.route("/api/payroll/<int:payroll_id>/payslip.pdf", methods=["GET"], endpoint="payslip_pdf")
    @login_required
    def payslip_pdf(payroll_id: int):
        employee_id, role = current_user()
        view = container.payroll_service.get_payslip_by_id(caller_id=employee_id, caller_role=role, payroll_id=payroll_id)
        return send_file(
            io.BytesIO(render_payslip_pdf(view)),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=view.filename(),
        )
