from __future__ import annotations

from datetime import timedelta

from flask import Flask, request, session

from ..common.web import admin_required, current_user, json_body, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS


def register(app: Flask, container: Container) -> None:
    def _start_session(s_user, *, remember: bool = False) -> None:
        session.clear()
        session.permanent = bool(remember)
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        session["employee_id"] = s_user.employee_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_employee():
        body = json_body()
        s_user = container.auth_service.register(
            email=body.get("email", ""),
            password=body.get("password", ""),
            full_name=body.get("full_name", ""),
            position=body.get("position", "Employee"),
        )
        _start_session(s_user)
        return ok({"employee_id": s_user.employee_id, "role": s_user.role.value}, reload=["employees"], status=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        s_user = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))
        _start_session(s_user, remember=bool(body.get("remember_me")))
        return ok({"employee_id": s_user.employee_id, "full_name": s_user.full_name, "role": s_user.role.value})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/me", methods=["GET"], endpoint="my_profile")
    @login_required
    def my_profile():
        employee_id, _ = current_user()
        return ok(container.employee_service.get_profile(employee_id).to_public_dict())

    @app.route("/api/me", methods=["PATCH"], endpoint="update_my_profile")
    @login_required
    def update_my_profile():
        employee_id, _ = current_user()
        changes = json_body()
        employee = container.employee_service.update_profile(employee_id=employee_id, changes=changes)
        session["name"] = employee.full_name
        return ok(employee.to_public_dict(), reload=["employees"])

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    @admin_required
    def list_employees():
        _, role = current_user()
        employees = container.employee_service.list_employees(
            caller_role=role,
            search=request.args.get("search"),
            position=request.args.get("position"),
        )
        return ok([e.to_public_dict() for e in employees])

    @app.route("/api/employees/<int:employee_id>", methods=["PATCH"], endpoint="update_employee")
    @admin_required
    def update_employee(employee_id: int):
        _, role = current_user()
        changes = json_body()
        employee = container.employee_service.admin_update(caller_role=role, employee_id=employee_id, changes=changes)
        return ok(employee.to_public_dict(), reload=["employees"])

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="delete_employee")
    @admin_required
    def delete_employee(employee_id: int):
        admin_id, role = current_user()
        container.employee_service.delete_employee(caller_role=role, caller_id=admin_id, employee_id=employee_id)
        return ok(reload=["employees"])
