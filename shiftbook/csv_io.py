from __future__ import annotations
import csv
from datetime import date
from pathlib import Path
from typing import Iterable

from tipout.models import Shift


CSV_HEADERS = [
    "id",
    "date",
    "employee_id",
    "role_id",
    "hours",
    "cash_tips",
    "credit_tips",
    "liquor_sales",
]


def export_shifts(path: Path, shifts: Iterable[Shift]) -> None:
    with path.open("w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for shift in shifts:
            writer.writerow(
                {
                    "id": shift.id,
                    "date": shift.date.isoformat(),
                    "employee_id": shift.employee_id,
                    "role_id": shift.role_id,
                    "hours": str(shift.hours),
                    "cash_tips": str(shift.cash_tips),
                    "credit_tips": str(shift.credit_tips),
                    "liquor_sales": str(shift.liquor_sales),
                }
            )


def import_shifts(path: Path) -> list[Shift]:
    shifts: list[Shift] = []
    with path.open() as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            shifts.append(
                Shift(
                    id=row["id"],
                    date=date.fromisoformat(row["date"]),
                    employee_id=row["employee_id"],
                    role_id=row["role_id"],
                    hours=row.get("hours") or "0",
                    cash_tips=row.get("cash_tips") or "0",
                    credit_tips=row.get("credit_tips") or "0",
                    liquor_sales=row.get("liquor_sales") or "0",
                )
            )
    return shifts
