from __future__ import annotations

from typing import Iterable, List, Dict, Any, Optional


ReportRow = Dict[str, Any]


def filter_rows(
    rows: Iterable[ReportRow],
    employee_ids: Optional[List[str]] = None,
    role_names: Optional[List[str]] = None,
    tipout_types: Optional[List[str]] = None,
) -> List[ReportRow]:
    """Filter report rows by employee, role name and tipout type."""

    def matches(row: ReportRow) -> bool:
        if employee_ids and "employee_id" in row and row["employee_id"] not in employee_ids:
            return False
        if role_names and "role_name" in row and row["role_name"] not in role_names:
            return False
        if tipout_types and "tipout_type" in row and row["tipout_type"] not in tipout_types:
            return False
        return True

    return [row for row in rows if matches(row)]
