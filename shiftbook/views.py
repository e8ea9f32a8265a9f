from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from tipout.models import Employee, Role, Shift


def format_shift_log(
    shifts: Iterable[Shift],
    employees: Mapping[str, Employee],
    roles: Mapping[str, Role],
    start: date | None = None,
    end: date | None = None,
) -> str:
    rows = ["Shifts", "Date        Employee              Role          Hours     Cash    Credit   Liquor"]
    total_hours = Decimal("0")
    for shift in sorted(shifts, key=lambda s: (s.date, s.id)):
        if (start and shift.date < start) or (end and shift.date > end):
            continue
        total_hours += shift.hours
        employee = employees.get(shift.employee_id)
        role = roles.get(shift.role_id)
        rows.append(
            f"{shift.date.isoformat()}  {(employee.name if employee else shift.employee_id):<20}  "
            f"{(role.name if role else shift.role_id):<12}  {shift.hours:>5.2f}  {shift.cash_tips:>7.2f}  "
            f"{shift.credit_tips:>8.2f}  {shift.liquor_sales:>7.2f}"
        )
    rows.append(f"Total hours: {total_hours:.2f}")
    return "\n".join(rows)
