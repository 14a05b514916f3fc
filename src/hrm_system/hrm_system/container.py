from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.enums import CheckInRepeatPolicy
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection | None

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    payroll_repo: PayrollRepository

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService


def wire_services(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    payroll_repo: PayrollRepository,
    conn: DatabaseConnection | None = None,
    repeat_policy: CheckInRepeatPolicy = CheckInRepeatPolicy.REOPEN,
    allow_self_approval: bool = False,
) -> Container:
    """Build the services on top of any set of repositories (MySQL or in-memory)."""

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        payroll_repo=payroll_repo,
        auth_service=AuthService(employees_repo),
        employee_service=EmployeeService(employees_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            employees_repo,
            strategy_factory=AttendanceStrategyFactory(),
            repeat_policy=repeat_policy,
        ),
        leave_service=LeaveService(leaves_repo, employees_repo, allow_self_approval=allow_self_approval),
        payroll_service=PayrollService(
            payroll_repo,
            employees_repo,
            attendance_repo,
            leaves_repo,
            calculator=StandardPayrollCalculator(),
        ),
    )


def build_container(
    *,
    db_config: dict,
    repeat_policy: CheckInRepeatPolicy = CheckInRepeatPolicy.REOPEN,
    allow_self_approval: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        repeat_policy=repeat_policy,
        allow_self_approval=allow_self_approval,
    )
