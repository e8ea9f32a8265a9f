from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import (
    ZERO,
    DailyRolePresence,
    Employee,
    EmployeeRoleSummary,
    OrphanedPool,
    PooledTips,
    ReportSummary,
    Shift,
    TipoutDelta,
    TipoutType,
    quantize,
)
from .resolver import ConfigResolver


def per_hour(amount: Decimal, hours: Decimal) -> Decimal:
    if not hours:
        return ZERO
    return quantize(amount / hours)


def _in_range(day: date, start: Optional[date], end: Optional[date]) -> bool:
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


def _tips(shift: Shift, pooled: Optional[Mapping[str, PooledTips]]) -> Tuple[Decimal, Decimal]:
    if pooled and shift.id in pooled:
        entry = pooled[shift.id]
        return entry.cash_tips, entry.credit_tips
    return shift.cash_tips, shift.credit_tips


def summarize(
    shifts: Iterable[Shift],
    deltas: Iterable[TipoutDelta],
    resolver: ConfigResolver,
    start: Optional[date] = None,
    end: Optional[date] = None,
    pooled: Optional[Mapping[str, PooledTips]] = None,
    employees: Optional[Mapping[str, Employee]] = None,
) -> List[EmployeeRoleSummary]:
    """Fold shifts and tipout deltas into one summary per employee and role."""
    employees = employees or {}
    grouped: Dict[Tuple[str, str], List[Shift]] = defaultdict(list)
    for shift in shifts:
        if _in_range(shift.date, start, end):
            grouped[(shift.employee_id, shift.role_id)].append(shift)

    net: Dict[Tuple[str, str, TipoutType], Decimal] = defaultdict(lambda: ZERO)
    for delta in deltas:
        if _in_range(delta.date, start, end):
            net[(delta.employee_id, delta.role_id, delta.tipout_type)] += delta.amount

    summaries: List[EmployeeRoleSummary] = []
    for (employee_id, role_id), bucket in grouped.items():
        employee = employees.get(employee_id)
        latest = max(shift.date for shift in bucket)
        row = EmployeeRoleSummary(
            employee_id=employee_id,
            employee_name=employee.name if employee else employee_id,
            role_id=role_id,
            role_name=resolver.role_name(role_id),
            base_pay_rate=resolver.resolve_base_pay(role_id, latest),
            tip_pool_group=resolver.resolve_tip_pool_group(role_id, latest),
        )
        for shift in bucket:
            cash, credit = _tips(shift, pooled)
            row.total_hours += shift.hours
            row.total_cash_tips += cash
            row.total_credit_tips += credit
            row.total_gross_credit_tips += shift.credit_tips
            row.total_liquor_sales += shift.liquor_sales

        row.total_bar_tipout = net[(employee_id, role_id, TipoutType.BAR)]
        row.total_host_tipout = net[(employee_id, role_id, TipoutType.HOST)]
        row.total_sa_tipout = net[(employee_id, role_id, TipoutType.SA)]

        # Not clamped: a negative figure is what payroll actually owes back.
        row.total_payroll_tips = quantize(
            row.total_credit_tips + row.total_bar_tipout + row.total_host_tipout + row.total_sa_tipout
        )
        row.payroll_total = quantize(row.base_pay_rate * row.total_hours + row.total_payroll_tips)
        row.cash_tips_per_hour = per_hour(row.total_cash_tips, row.total_hours)
        row.credit_tips_per_hour = per_hour(row.total_payroll_tips, row.total_hours)
        row.total_tips_per_hour = per_hour(row.total_cash_tips + row.total_payroll_tips, row.total_hours)

        for name in (
            "total_cash_tips",
            "total_credit_tips",
            "total_gross_credit_tips",
            "total_liquor_sales",
            "total_bar_tipout",
            "total_host_tipout",
            "total_sa_tipout",
        ):
            setattr(row, name, quantize(getattr(row, name)))
        summaries.append(row)

    summaries.sort(key=lambda r: (r.employee_name.lower(), r.role_name.lower(), r.employee_id, r.role_id))
    return summaries


def daily_presence(shifts: Iterable[Shift], resolver: ConfigResolver) -> Dict[date, DailyRolePresence]:
    """Which receiving roles worked each day, whether or not anything was paid in."""
    flags: Dict[date, Dict[str, bool]] = defaultdict(lambda: {"has_host": False, "has_sa": False, "has_bar": False})
    for shift in shifts:
        day = flags[shift.date]
        if resolver.receives(shift.role_id, TipoutType.HOST, shift.date):
            day["has_host"] = True
        if resolver.receives(shift.role_id, TipoutType.SA, shift.date):
            day["has_sa"] = True
        if resolver.receives(shift.role_id, TipoutType.BAR, shift.date):
            day["has_bar"] = True
    return {day: DailyRolePresence(**values) for day, values in sorted(flags.items())}


def overall_summary(
    shifts: Iterable[Shift],
    deltas: Iterable[TipoutDelta],
    resolver: ConfigResolver,
    pooled: Optional[Mapping[str, PooledTips]] = None,
    orphaned: Iterable[OrphanedPool] = (),
) -> ReportSummary:
    shift_list = list(shifts)
    summary = ReportSummary()
    paid: Dict[TipoutType, Decimal] = defaultdict(lambda: ZERO)
    net_by_shift: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for delta in deltas:
        net_by_shift[delta.shift_id] += delta.amount
        if delta.amount < 0:
            paid[delta.tipout_type] -= delta.amount

    bar = {"hours": ZERO, "cash": ZERO, "payroll": ZERO}
    server = {"hours": ZERO, "cash": ZERO, "payroll": ZERO}
    for shift in shift_list:
        cash, credit = _tips(shift, pooled)
        summary.total_shifts += 1
        summary.total_hours += shift.hours
        summary.total_cash_tips += cash
        summary.total_credit_tips += credit
        summary.total_liquor_sales += shift.liquor_sales

        receives = {t: resolver.receives(shift.role_id, t, shift.date) for t in TipoutType}
        if receives[TipoutType.BAR]:
            bucket = bar
        elif resolver.pays(shift.role_id, TipoutType.BAR, shift.date) and not any(receives.values()):
            bucket = server
        else:
            continue
        bucket["hours"] += shift.hours
        bucket["cash"] += cash
        bucket["payroll"] += credit + net_by_shift[shift.id]

    summary.total_cash_tips = quantize(summary.total_cash_tips)
    summary.total_credit_tips = quantize(summary.total_credit_tips)
    summary.total_liquor_sales = quantize(summary.total_liquor_sales)
    summary.total_bar_tipout_paid = quantize(paid[TipoutType.BAR])
    summary.total_host_tipout_paid = quantize(paid[TipoutType.HOST])
    summary.total_sa_tipout_paid = quantize(paid[TipoutType.SA])
    summary.orphaned_total = quantize(sum((o.amount for o in orphaned), ZERO))
    summary.cash_tips_per_hour = per_hour(summary.total_cash_tips, summary.total_hours)
    summary.credit_tips_per_hour = per_hour(summary.total_credit_tips, summary.total_hours)

    summary.bar_cash_tips_per_hour = per_hour(bar["cash"], bar["hours"])
    summary.bar_credit_tips_per_hour = per_hour(bar["payroll"], bar["hours"])
    summary.bar_tips_per_hour = per_hour(bar["cash"] + bar["payroll"], bar["hours"])
    summary.server_cash_tips_per_hour = per_hour(server["cash"], server["hours"])
    summary.server_credit_tips_per_hour = per_hour(server["payroll"], server["hours"])
    summary.server_tips_per_hour = per_hour(server["cash"] + server["payroll"], server["hours"])
    return summary
