from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, current_user, json_body, login_required, ok
from ..container import Container
from ..core.enums import LeaveStatus


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves", methods=["POST"], endpoint="apply_leave")
    @login_required
    def apply_leave():
        employee_id, _ = current_user()
        body = json_body()
        leave = container.leave_service.apply(
            employee_id=employee_id,
            leave_type=body.get("type", ""),
            start_date=body.get("start_date"),
            end_date=body.get("end_date"),
            reason=body.get("reason", ""),
        )
        return ok(leave.to_dict(), reload=["leaves"], status=201)

    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    @login_required
    def list_leaves():
        employee_id, role = current_user()
        rows = container.leave_service.list_leaves(
            caller_id=employee_id,
            caller_role=role,
            employee_id=request.args.get("employee_id", type=int),
            status=request.args.get("status"),
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/leaves/<int:leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @admin_required
    def approve_leave(leave_id: int):
        admin_id, role = current_user()
        leave = container.leave_service.decide(
            caller_role=role, approver_id=admin_id, leave_id=leave_id, decision=LeaveStatus.APPROVED
        )
        return ok(leave.to_dict(), reload=["leaves"])

    @app.route("/api/leaves/<int:leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @admin_required
    def reject_leave(leave_id: int):
        admin_id, role = current_user()
        leave = container.leave_service.decide(
            caller_role=role, approver_id=admin_id, leave_id=leave_id, decision=LeaveStatus.REJECTED
        )
        return ok(leave.to_dict(), reload=["leaves"])

    @app.route("/api/leaves/<int:leave_id>", methods=["DELETE"], endpoint="withdraw_leave")
    @login_required
    def withdraw_leave(leave_id: int):
        employee_id, _ = current_user()
        container.leave_service.withdraw(leave_id=leave_id, requester_id=employee_id)
        return ok(reload=["leaves"])
