from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from hrm_system.core.enums import LeaveStatus, LeaveType, PayrollStatus, Role
from hrm_system.core.exceptions import (
    AuthorizationError,
    EmployeeNotFound,
    InvalidPayrollTransition,
    PayrollAlreadyExists,
    RecordNotFound,
    ValidationError,
)


@pytest.fixture
def service(container):
    return container.payroll_service


@pytest.fixture
def november_activity(attendance_repo, leaves_repo, employee):
    eid = employee.employee_id
    # two late days inside November, both edges of the window
    attendance_repo.add(employee_id=eid, check_in=datetime(2025, 11, 1, 0, 0, 0), is_late=True)
    attendance_repo.add(employee_id=eid, check_in=datetime(2025, 11, 30, 23, 59, 59), is_late=True)
    attendance_repo.add(employee_id=eid, check_in=datetime(2025, 11, 12, 3, 0, 0), is_late=False)
    # outside the month
    attendance_repo.add(employee_id=eid, check_in=datetime(2025, 12, 1, 0, 0, 0), is_late=True)

    for day in (3, 10, 17, 24):
        leaves_repo.add(employee_id=eid, start_date=date(2025, 11, day), leave_type=LeaveType.CASUAL, status=LeaveStatus.APPROVED)
    leaves_repo.add(employee_id=eid, start_date=date(2025, 11, 25), leave_type=LeaveType.SICK, status=LeaveStatus.PENDING)
    leaves_repo.add(employee_id=eid, start_date=date(2025, 11, 26), leave_type=LeaveType.SICK, status=LeaveStatus.REJECTED)
    leaves_repo.add(employee_id=eid, start_date=date(2025, 12, 1), leave_type=LeaveType.SICK, status=LeaveStatus.APPROVED)
    return employee


def test_generate_counts_month_activity(service, november_activity):
    rec = service.generate(caller_role=Role.ADMIN, employee_id=november_activity.employee_id, month="2025-11")

    assert rec.status == PayrollStatus.DRAFT
    assert rec.month == date(2025, 11, 1)
    assert rec.late_days == 2
    assert rec.leave_days_taken == 4
    assert rec.excess_leaves == 2
    assert rec.late_deduction == Decimal("5000.00")
    assert rec.leave_deduction == Decimal("10000.00")
    assert rec.net_salary == Decimal("35000.00")


def test_generate_twice_for_same_month_fails(service, employee):
    service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")

    with pytest.raises(PayrollAlreadyExists) as exc:
        service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11-15")

    assert exc.value.to_dict()["month"] == "2025-11"


def test_generate_unknown_employee(service):
    with pytest.raises(EmployeeNotFound):
        service.generate(caller_role=Role.ADMIN, employee_id=999, month="2025-11")


def test_generate_rejects_bad_month(service, employee):
    with pytest.raises(ValidationError):
        service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="November")


def test_generate_is_admin_only(service, employee):
    with pytest.raises(AuthorizationError):
        service.generate(caller_role=Role.EMPLOYEE, employee_id=employee.employee_id, month="2025-11")


def test_generate_for_all_skips_existing(service, employee, admin):
    service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")

    result = service.generate_for_all(caller_role=Role.ADMIN, month="2025-11")

    assert [r.employee_id for r in result.generated] == [admin.employee_id]
    assert result.skipped == [employee.employee_id]
    assert result.to_dict()["month"] == "2025-11"


def test_approve_then_pay(service, employee):
    rec = service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")

    approved = service.approve(caller_role=Role.ADMIN, payroll_id=rec.payroll_id)
    paid = service.mark_paid(caller_role=Role.ADMIN, payroll_id=rec.payroll_id)

    assert approved.status == PayrollStatus.APPROVED
    assert approved.approved_at is not None
    assert paid.status == PayrollStatus.PAID
    assert paid.paid_at is not None
    assert paid.net_salary == rec.net_salary


def test_approve_twice_is_invalid_transition(service, employee):
    rec = service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")
    first = service.approve(caller_role=Role.ADMIN, payroll_id=rec.payroll_id)

    with pytest.raises(InvalidPayrollTransition):
        service.approve(caller_role=Role.ADMIN, payroll_id=rec.payroll_id)

    assert service.list_payroll(caller_id=employee.employee_id, caller_role=Role.EMPLOYEE)[0].record.approved_at == first.approved_at


def test_pay_draft_is_invalid_transition(service, employee):
    rec = service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")

    with pytest.raises(InvalidPayrollTransition):
        service.mark_paid(caller_role=Role.ADMIN, payroll_id=rec.payroll_id)


def test_approve_missing_record(service):
    with pytest.raises(RecordNotFound):
        service.approve(caller_role=Role.ADMIN, payroll_id=77)


def test_payslip_is_scoped_to_owner(service, employee, admin):
    rec = service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")

    view = service.get_payslip(caller_id=employee.employee_id, caller_role=Role.EMPLOYEE, employee_id=employee.employee_id, month="2025-11")
    assert view.full_name == "Ayesha Khan"

    with pytest.raises(AuthorizationError):
        service.get_payslip_by_id(caller_id=admin.employee_id + 100, caller_role=Role.EMPLOYEE, payroll_id=rec.payroll_id)
    with pytest.raises(RecordNotFound):
        service.get_payslip(caller_id=admin.employee_id, caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-12")


def test_concurrent_generate_caught_by_storage_unique_key(service, payroll_repo, employee):
    service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")
    payroll_repo.hide_from_precheck = 1

    with pytest.raises(PayrollAlreadyExists):
        service.generate(caller_role=Role.ADMIN, employee_id=employee.employee_id, month="2025-11")

    assert len(payroll_repo.rows) == 1
