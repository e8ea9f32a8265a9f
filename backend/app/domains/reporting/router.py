from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from opentelemetry import metrics, trace
from pydantic import BaseModel

from shiftbook.role_configs import current_rates
from shiftbook.storage import DataStore
from tipout.errors import TipoutInputError
from tipout_reports.data import compute_report, load_snapshot

from app.core.logging import get_logger
from app.db.store import get_store

router = APIRouter(prefix="/reports", tags=["reporting"])
logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)
reports_computed = metrics.get_meter(__name__).create_counter(
    "tipout.reports.computed", description="Tipout reports computed over the store"
)


class EmployeeRoleSummaryOut(BaseModel):
    employee_id: str
    employee_name: str
    role_id: str
    role_name: str
    total_hours: Decimal
    total_cash_tips: Decimal
    total_credit_tips: Decimal
    total_gross_credit_tips: Decimal
    total_liquor_sales: Decimal
    total_bar_tipout: Decimal
    total_host_tipout: Decimal
    total_sa_tipout: Decimal
    cash_tips_per_hour: Decimal
    credit_tips_per_hour: Decimal
    total_tips_per_hour: Decimal
    base_pay_rate: Decimal
    total_payroll_tips: Decimal
    payroll_total: Decimal
    tip_pool_group: str | None = None


class ReportSummaryOut(BaseModel):
    total_shifts: int
    total_hours: Decimal
    total_cash_tips: Decimal
    total_credit_tips: Decimal
    total_liquor_sales: Decimal
    total_bar_tipout_paid: Decimal
    total_host_tipout_paid: Decimal
    total_sa_tipout_paid: Decimal
    orphaned_total: Decimal
    cash_tips_per_hour: Decimal
    credit_tips_per_hour: Decimal
    bar_tips_per_hour: Decimal
    bar_cash_tips_per_hour: Decimal
    bar_credit_tips_per_hour: Decimal
    server_tips_per_hour: Decimal
    server_cash_tips_per_hour: Decimal
    server_credit_tips_per_hour: Decimal


class PresenceOut(BaseModel):
    date: date
    has_host: bool
    has_sa: bool
    has_bar: bool


class OrphanedPoolOut(BaseModel):
    date: date
    tipout_type: str
    group: str
    amount: Decimal


class ConfigOverlapOut(BaseModel):
    role_id: str
    tipout_type: str
    first_config_id: str
    second_config_id: str
    overlap_start: date


class ReportOut(BaseModel):
    summary: ReportSummaryOut | None
    employee_summaries: list[EmployeeRoleSummaryOut]
    role_configs: dict[str, dict[str, Decimal]]
    presence: list[PresenceOut] = []
    orphaned_pools: list[OrphanedPoolOut] = []
    config_overlaps: list[ConfigOverlapOut] = []


@router.get("", response_model=ReportOut)
def tipout_report(
    start_date: date = Query(...),
    end_date: date = Query(...),
    store: DataStore = Depends(get_store),
) -> ReportOut:
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    snapshot = load_snapshot(store, start_date, end_date)
    if not snapshot.shifts:
        return ReportOut(summary=None, employee_summaries=[], role_configs={})

    with tracer.start_as_current_span("tipout.compute") as span:
        span.set_attribute("tipout.shifts", len(snapshot.shifts))
        try:
            report = compute_report(snapshot)
        except TipoutInputError as exc:
            logger.error("tipout_report_failed", error=str(exc))
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        span.set_attribute("tipout.orphaned_pools", len(report.orphaned_pools))
    reports_computed.add(1, {"orphaned": bool(report.orphaned_pools)})

    rates = current_rates(store, {shift.role_id for shift in snapshot.shifts}, end_date)
    return ReportOut(
        summary=ReportSummaryOut(**vars(report.summary)),
        employee_summaries=[EmployeeRoleSummaryOut(**vars(row)) for row in report.summaries],
        role_configs=rates,
        presence=[PresenceOut(date=day, **vars(flags)) for day, flags in report.presence.items()],
        orphaned_pools=[
            OrphanedPoolOut(date=o.date, tipout_type=o.tipout_type.value, group=o.group, amount=o.amount)
            for o in report.orphaned_pools
        ],
        config_overlaps=[
            ConfigOverlapOut(
                role_id=o.role_id,
                tipout_type=o.tipout_type.value,
                first_config_id=o.first_config_id,
                second_config_id=o.second_config_id,
                overlap_start=o.overlap_start,
            )
            for o in report.overlaps
        ],
    )
