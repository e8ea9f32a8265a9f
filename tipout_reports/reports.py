from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Tuple

from tipout.models import ZERO, TipoutReport

from .filters import filter_rows


@dataclass
class ReportRequest:
    report_type: str
    employee_ids: List[str] | None = None
    role_names: List[str] | None = None
    tipout_types: List[str] | None = None


ReportRow = Dict[str, Any]


def employee_summary(report: TipoutReport) -> List[ReportRow]:
    return [asdict(row) for row in report.summaries]


def daily_tipouts(report: TipoutReport) -> List[ReportRow]:
    """Net tipout per employee, role, day and type, with paid and received split out."""
    buckets: Dict[Tuple[date, str, str, str], Dict[str, Decimal]] = defaultdict(
        lambda: {"paid": ZERO, "received": ZERO}
    )
    for delta in report.deltas:
        key = (delta.date, delta.employee_id, delta.role_id, delta.tipout_type.value)
        if delta.amount < 0:
            buckets[key]["paid"] -= delta.amount
        else:
            buckets[key]["received"] += delta.amount

    names = {(row.employee_id, row.role_id): (row.employee_name, row.role_name) for row in report.summaries}
    rows: List[ReportRow] = []
    for (day, employee_id, role_id, tipout_type), values in sorted(buckets.items()):
        employee_name, role_name = names.get((employee_id, role_id), (employee_id, role_id))
        rows.append(
            {
                "date": day,
                "employee_id": employee_id,
                "employee_name": employee_name,
                "role_name": role_name,
                "tipout_type": tipout_type,
                "paid": values["paid"],
                "received": values["received"],
                "net": values["received"] - values["paid"],
            }
        )
    return rows


def pools(report: TipoutReport) -> List[ReportRow]:
    orphaned = {(o.date, o.tipout_type, o.group) for o in report.orphaned_pools}
    rows: List[ReportRow] = []
    for pool in sorted(report.pools, key=lambda p: (p.date, p.tipout_type.value, p.group)):
        presence = report.presence.get(pool.date)
        rows.append(
            {
                "date": pool.date,
                "tipout_type": pool.tipout_type.value,
                "group": pool.group,
                "contributors": len(pool.contributions),
                "total": pool.total,
                "distributed": pool.key not in orphaned,
                "has_host": presence.has_host if presence else False,
                "has_sa": presence.has_sa if presence else False,
                "has_bar": presence.has_bar if presence else False,
            }
        )
    return rows


def anomalies(report: TipoutReport) -> List[ReportRow]:
    rows: List[ReportRow] = []
    for orphan in report.orphaned_pools:
        rows.append(
            {
                "kind": "orphaned_pool",
                "date": orphan.date,
                "tipout_type": orphan.tipout_type.value,
                "detail": f"group {orphan.group} had no eligible receivers",
                "amount": orphan.amount,
            }
        )
    for overlap in report.overlaps:
        rows.append(
            {
                "kind": "config_overlap",
                "date": overlap.overlap_start,
                "tipout_type": overlap.tipout_type.value,
                "detail": (
                    f"role {overlap.role_id} configs {overlap.first_config_id} and "
                    f"{overlap.second_config_id} overlap"
                ),
                "amount": None,
            }
        )
    return rows


def overall(report: TipoutReport) -> List[ReportRow]:
    return [{"start": report.start, "end": report.end, **asdict(report.summary)}]


REPORT_BUILDERS: Dict[str, Callable[[TipoutReport], List[ReportRow]]] = {
    "employee-summary": employee_summary,
    "daily-tipouts": daily_tipouts,
    "pools": pools,
    "anomalies": anomalies,
    "overall": overall,
}


def build_report(request: ReportRequest, report: TipoutReport) -> List[ReportRow]:
    try:
        builder = REPORT_BUILDERS[request.report_type]
    except KeyError:
        raise ValueError(f"Unknown report type: {request.report_type}") from None
    rows = builder(report)
    return filter_rows(
        rows,
        employee_ids=request.employee_ids,
        role_names=request.role_names,
        tipout_types=request.tipout_types,
    )
