import io
from datetime import date

import pandas as pd
import pytest

from hr_records.core.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def march(container, staff, fixed_now):
    svc = container.attendance_service
    svc.mark(employee=staff.employee, payload={"date": "2024-03-01", "check_in": "09:00", "check_out": "17:00"}, now=fixed_now)
    svc.mark(employee=staff.employee, payload={"date": "2024-03-02", "status": "leave"}, now=fixed_now)
    svc.mark(employee=staff.employee, payload={"date": "2024-03-03", "check_in": "09:00", "check_out": "13:30", "status": "halfday"}, now=fixed_now)
    svc.mark(employee=staff.hr, payload={"date": "2024-03-01", "status": "absent"}, now=fixed_now)
    svc.mark(employee=staff.hr, payload={"date": "2024-04-01"}, now=fixed_now)


def test_summarize_counts_and_hours(container, march):
    rows = container.payroll_report_service.summarize(start=date(2024, 3, 1), end=date(2024, 3, 31))

    assert [r["employee_id"] for r in rows] == ["E-1", "HR-1"]
    e1, hr = rows
    assert (e1["present"], e1["leave"], e1["halfday"], e1["absent"]) == (1, 1, 1, 0)
    assert e1["total_hours"] == 12.5
    assert e1["department"] == "Finance"
    assert (hr["absent"], hr["present"]) == (1, 0)


def test_export_payroll_workbook(container, staff, repos, march):
    export = container.payroll_report_service.export_payroll(actor=staff.hr, start="2024-03-01", end="2024-03-31")

    assert export.filename == "payroll_attendance_2024-03-01_to_2024-03-31.xlsx"
    df = pd.read_excel(io.BytesIO(export.content))
    assert list(df.columns) == ["Employee ID", "Name", "Department", "Present", "Absent", "Leave", "Half Day", "Total Hours"]
    assert len(df) == 2
    assert repos.audit.actions()[-1] == "PAYROLL_EXPORTED"


def test_export_payroll_validation(container, staff):
    svc = container.payroll_report_service
    with pytest.raises(ValidationError):
        svc.export_payroll(actor=staff.hr, start=None, end="2024-03-31")
    with pytest.raises(ValidationError):
        svc.export_payroll(actor=staff.hr, start="2024-04-01", end="2024-03-31")
    with pytest.raises(AuthorizationError):
        svc.export_payroll(actor=staff.employee, start="2024-03-01", end="2024-03-31")
