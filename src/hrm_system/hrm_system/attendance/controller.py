from __future__ import annotations

import csv
import io
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import local_day, now_utc, parse_iso_date
from ..common.web import admin_required, current_user, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _date_arg(name: str):
        value = request.args.get(name)
        return parse_iso_date(value) if value else None

    def _write_roster_csv(*, report, filename: str):
        """Write roster rows to a CSV response."""

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "employee_id",
                "full_name",
                "position",
                "status",
                "check_in",
                "check_out",
                "hours_worked",
                "is_late",
            ],
        )
        writer.writeheader()
        for row in report.rows:
            writer.writerow(row.to_dict())

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="check_in")
    @login_required
    def check_in():
        employee_id, _ = current_user()
        record = container.attendance_service.check_in(employee_id)
        return ok(record.to_dict(), reload=["attendance"], status=201)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="check_out")
    @login_required
    def check_out():
        employee_id, _ = current_user()
        record = container.attendance_service.check_out(employee_id)
        return ok(record.to_dict(), reload=["attendance"])

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        employee_id, _ = current_user()
        record = container.attendance_service.get_today_record(employee_id)
        return ok(record.to_dict() if record else None)

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        employee_id, role = current_user()
        rows = container.attendance_service.list_attendance(
            caller_id=employee_id,
            caller_role=role,
            employee_id=request.args.get("employee_id", type=int),
            start_day=_date_arg("start_date"),
            end_day=_date_arg("end_date"),
            search=request.args.get("search"),
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/attendance/roster", methods=["GET"], endpoint="attendance_roster")
    @admin_required
    def attendance_roster():
        _, role = current_user()
        day = _date_arg("date") or local_day(now_utc())
        report = container.attendance_service.daily_roster(
            caller_role=role,
            day=day,
            search=request.args.get("search"),
            position=request.args.get("position"),
        )
        fmt: Optional[str] = request.args.get("format")
        if fmt == "csv":
            return _write_roster_csv(report=report, filename=f"attendance_{day.isoformat()}.csv")
        return ok({"summary": report.summary(), "rows": [r.to_dict() for r in report.rows]})
