from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest
from werkzeug.security import generate_password_hash

from hrm_system.attendance.model import AttendanceListRow, AttendanceRecord
from hrm_system.container import wire_services
from hrm_system.core.enums import LeaveStatus, PayrollStatus, Role
from hrm_system.core.exceptions import DuplicateKeyError
from hrm_system.employees.model import Employee
from hrm_system.leaves.model import LeaveListRow, LeaveRequest
from hrm_system.payroll.model import PayrollListRow, PayrollRecord


class FakeEmployeesRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Employee] = {}
        # other fakes whose rows point at employees
        self.linked: list = []

    def add(self, *, full_name="Ayesha Khan", email=None, position="Developer", salary="50000", role=Role.EMPLOYEE, password="secret123"):
        eid = self._next_id
        self._next_id += 1
        self.rows[eid] = Employee(
            employee_id=eid,
            email=email or f"user{eid}@example.com",
            full_name=full_name,
            position=position,
            salary=Decimal(salary),
            role=role,
            join_date=date(2025, 1, 1),
            password_hash=generate_password_hash(password),
        )
        return self.rows[eid]

    def get_by_id(self, employee_id):
        return self.rows.get(int(employee_id))

    def get_by_email(self, email):
        return next((e for e in self.rows.values() if e.email == email), None)

    def create(self, *, email, password_hash, full_name, position, salary, role, join_date):
        if self.get_by_email(email):
            raise DuplicateKeyError("Duplicate entry", errno=1062)
        eid = self._next_id
        self._next_id += 1
        self.rows[eid] = Employee(
            employee_id=eid,
            email=email,
            full_name=full_name,
            position=position,
            salary=Decimal(salary),
            role=role,
            join_date=join_date,
            password_hash=password_hash,
        )
        return eid

    def list(self, *, search=None, position=None):
        out = [
            e
            for e in self.rows.values()
            if (not search or search.lower() in e.full_name.lower()) and (not position or e.position == position)
        ]
        return sorted(out, key=lambda e: e.full_name)

    def update_fields(self, employee_id, fields):
        self.rows[int(employee_id)] = replace(self.rows[int(employee_id)], **dict(fields))

    def has_dependent_records(self, employee_id):
        eid = int(employee_id)
        return any(
            r.employee_id == eid or getattr(r, "approved_by", None) == eid
            for repo in self.linked
            for r in repo.rows.values()
        )

    def delete(self, employee_id):
        return self.rows.pop(int(employee_id), None) is not None


class FakeAttendanceRepo:
    def __init__(self, employees: FakeEmployeesRepo):
        self._employees = employees
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}
        # Number of upcoming pre-check lookups that miss, as if a concurrent
        # insert had not landed yet.
        self.hide_from_precheck = 0
        employees.linked.append(self)

    def add(self, *, employee_id, check_in, check_out=None, is_late=False, work_date=None, hours_worked="0.00"):
        aid = self._next_id
        self._next_id += 1
        self.rows[aid] = AttendanceRecord(
            attendance_id=aid,
            employee_id=employee_id,
            work_date=work_date or check_in.date(),
            check_in=check_in,
            check_out=check_out,
            is_late=is_late,
            hours_worked=Decimal(hours_worked),
        )
        return self.rows[aid]

    def _between(self, employee_id, start, end):
        out = [r for r in self.rows.values() if r.employee_id == int(employee_id) and start <= r.check_in < end]
        return sorted(out, key=lambda r: r.check_in, reverse=True)

    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def get_for_employee_between(self, employee_id, start, end):
        if self.hide_from_precheck:
            self.hide_from_precheck -= 1
            return None
        found = self._between(employee_id, start, end)
        return found[0] if found else None

    def get_open_for_employee_between(self, employee_id, start, end):
        return next((r for r in self._between(employee_id, start, end) if r.check_out is None), None)

    def create_check_in(self, *, employee_id, work_date, check_in, is_late):
        if any(r.employee_id == employee_id and r.work_date == work_date for r in self.rows.values()):
            raise DuplicateKeyError("Duplicate entry", errno=1062)
        return self.add(employee_id=employee_id, check_in=check_in, is_late=is_late, work_date=work_date).attendance_id

    def reopen(self, *, attendance_id, check_in, is_late):
        rec = self.rows.get(int(attendance_id))
        if not rec or rec.check_out is None:
            return False
        self.rows[rec.attendance_id] = replace(rec, check_in=check_in, check_out=None, is_late=is_late, hours_worked=Decimal("0.00"))
        return True

    def update_check_out(self, *, attendance_id, check_out, hours_worked):
        rec = self.rows.get(int(attendance_id))
        if not rec or rec.check_out is not None:
            return False
        self.rows[rec.attendance_id] = replace(rec, check_out=check_out, hours_worked=hours_worked)
        return True

    def list_records(self, *, employee_id=None, start=None, end=None, search=None, limit=200):
        out = []
        for r in sorted(self.rows.values(), key=lambda r: r.check_in, reverse=True):
            emp = self._employees.get_by_id(r.employee_id)
            if employee_id is not None and r.employee_id != int(employee_id):
                continue
            if start is not None and r.check_in < start:
                continue
            if end is not None and r.check_in >= end:
                continue
            if search and search.lower() not in emp.full_name.lower():
                continue
            out.append(AttendanceListRow(record=r, full_name=emp.full_name))
        return out[:limit]

    def count_late_between(self, employee_id, start, end):
        return sum(1 for r in self.rows.values() if r.employee_id == int(employee_id) and r.is_late and start <= r.check_in <= end)


class FakeLeavesRepo:
    def __init__(self, employees: FakeEmployeesRepo):
        self._employees = employees
        self._next_id = 1
        self.rows: dict[int, LeaveRequest] = {}
        self.hide_from_precheck = 0
        employees.linked.append(self)

    def add(self, *, employee_id, start_date, leave_type, status=LeaveStatus.PENDING, reason="Family event", end_date=None):
        lid = self._next_id
        self._next_id += 1
        self.rows[lid] = LeaveRequest(
            leave_id=lid,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date or start_date,
            reason=reason,
            status=status,
            created_at=datetime(2025, 11, 1, 5, 0, 0),
        )
        return self.rows[lid]

    def get_by_id(self, leave_id):
        return self.rows.get(int(leave_id))

    def find_by_employee_and_start(self, employee_id, start_date):
        if self.hide_from_precheck:
            self.hide_from_precheck -= 1
            return []
        return [r for r in self.rows.values() if r.employee_id == int(employee_id) and r.start_date == start_date]

    def create(self, *, employee_id, leave_type, start_date, end_date, reason):
        if any(r.employee_id == employee_id and r.start_date == start_date for r in self.rows.values()):
            raise DuplicateKeyError("Duplicate entry", errno=1062)
        return self.add(employee_id=employee_id, start_date=start_date, end_date=end_date, leave_type=leave_type, reason=reason).leave_id

    def decide(self, *, leave_id, status, approved_by, decided_at):
        req = self.rows.get(int(leave_id))
        if not req or req.status != LeaveStatus.PENDING:
            return False
        self.rows[req.leave_id] = replace(req, status=status, approved_by=approved_by, decided_at=decided_at)
        return True

    def delete_pending(self, *, leave_id, employee_id):
        req = self.rows.get(int(leave_id))
        if not req or req.employee_id != int(employee_id) or req.status != LeaveStatus.PENDING:
            return False
        del self.rows[req.leave_id]
        return True

    def list_requests(self, *, employee_id=None, status=None, limit=200):
        out = []
        for r in sorted(self.rows.values(), key=lambda r: r.leave_id, reverse=True):
            if employee_id is not None and r.employee_id != int(employee_id):
                continue
            if status is not None and r.status != status:
                continue
            emp = self._employees.get_by_id(r.employee_id)
            approver = self._employees.get_by_id(r.approved_by) if r.approved_by else None
            out.append(
                LeaveListRow(
                    request=r,
                    full_name=emp.full_name,
                    position=emp.position,
                    approver_name=approver.full_name if approver else None,
                )
            )
        return out[:limit]

    def count_approved_starting_between(self, employee_id, start, end):
        return sum(
            1
            for r in self.rows.values()
            if r.employee_id == int(employee_id) and r.status == LeaveStatus.APPROVED and start <= r.start_date <= end
        )


class FakePayrollRepo:
    def __init__(self, employees: FakeEmployeesRepo):
        self._employees = employees
        self._next_id = 1
        self.rows: dict[int, PayrollRecord] = {}
        self.hide_from_precheck = 0
        employees.linked.append(self)

    def get_by_id(self, payroll_id):
        return self.rows.get(int(payroll_id))

    def _find(self, employee_id, month):
        return next((r for r in self.rows.values() if r.employee_id == int(employee_id) and r.month == month), None)

    def get_for_employee_month(self, employee_id, month):
        if self.hide_from_precheck:
            self.hide_from_precheck -= 1
            return None
        return self._find(employee_id, month)

    def create(self, *, employee_id, month, figures, generated_at):
        if self._find(employee_id, month):
            raise DuplicateKeyError("Duplicate entry", errno=1062)
        pid = self._next_id
        self._next_id += 1
        self.rows[pid] = PayrollRecord(
            payroll_id=pid,
            employee_id=employee_id,
            month=month,
            base_salary=figures.base_salary,
            late_days=figures.late_days,
            late_deduction=figures.late_deduction,
            leave_days_taken=figures.leave_days_taken,
            leave_allowance=figures.leave_allowance,
            excess_leaves=figures.excess_leaves,
            leave_deduction=figures.leave_deduction,
            net_salary=figures.net_salary,
            status=PayrollStatus.DRAFT,
            generated_at=generated_at,
        )
        return pid

    def transition(self, *, payroll_id, from_status, to_status, at):
        rec = self.rows.get(int(payroll_id))
        if not rec or rec.status != from_status:
            return False
        stamp = {"approved_at": at} if to_status == PayrollStatus.APPROVED else {"paid_at": at}
        self.rows[rec.payroll_id] = replace(rec, status=to_status, **stamp)
        return True

    def _row(self, rec):
        emp = self._employees.get_by_id(rec.employee_id)
        return PayrollListRow(record=rec, full_name=emp.full_name, position=emp.position)

    def list_records(self, *, employee_id=None, month=None, limit=200):
        out = [
            self._row(r)
            for r in sorted(self.rows.values(), key=lambda r: r.generated_at, reverse=True)
            if (employee_id is None or r.employee_id == int(employee_id)) and (month is None or r.month == month)
        ]
        return out[:limit]

    def get_row(self, payroll_id):
        rec = self.rows.get(int(payroll_id))
        return self._row(rec) if rec else None


@pytest.fixture
def employees_repo():
    return FakeEmployeesRepo()


@pytest.fixture
def attendance_repo(employees_repo):
    return FakeAttendanceRepo(employees_repo)


@pytest.fixture
def leaves_repo(employees_repo):
    return FakeLeavesRepo(employees_repo)


@pytest.fixture
def payroll_repo(employees_repo):
    return FakePayrollRepo(employees_repo)


@pytest.fixture
def container(employees_repo, attendance_repo, leaves_repo, payroll_repo):
    return wire_services(
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        payroll_repo=payroll_repo,
    )


@pytest.fixture
def admin(employees_repo):
    return employees_repo.add(full_name="Hina Admin", email="admin@example.com", position="HR Manager", role=Role.ADMIN)


@pytest.fixture
def employee(employees_repo):
    return employees_repo.add(full_name="Ayesha Khan", email="ayesha@example.com")
