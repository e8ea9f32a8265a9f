from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import TipoutInputError

CENT = Decimal("0.01")
ZERO = Decimal("0")
DEFAULT_GROUP = "default"


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    try:
        # floats go through str() so 0.05 stays 0.05
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise TipoutInputError(f"{value!r} is not a number") from None
    if not number.is_finite():
        raise TipoutInputError(f"{value!r} is not a finite amount")
    return number


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class TipoutType(str, Enum):
    BAR = "bar"
    HOST = "host"
    SA = "sa"


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    active: bool = True
    default_role_id: Optional[str] = None


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    base_pay_rate: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_pay_rate", to_decimal(self.base_pay_rate))


@dataclass(frozen=True)
class RoleConfig:
    id: str
    role_id: str
    tipout_type: TipoutType
    percentage_rate: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    receives_tipout: bool = False
    pays_tipout: bool = True
    distribution_group: Optional[str] = None
    tip_pool_group: Optional[str] = None
    base_pay_rate: Optional[Decimal] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "tipout_type", TipoutType(self.tipout_type))
        except ValueError as exc:
            raise TipoutInputError(f"Config {self.id} has unknown tipout type {self.tipout_type!r}") from exc
        rate = to_decimal(self.percentage_rate)
        if not ZERO <= rate <= 1:
            raise TipoutInputError(f"Config {self.id} percentage rate {rate} is not a 0-1 fraction")
        object.__setattr__(self, "percentage_rate", rate)
        if self.base_pay_rate is not None:
            object.__setattr__(self, "base_pay_rate", to_decimal(self.base_pay_rate))
        if self.effective_to is not None and self.effective_to < self.effective_from:
            raise TipoutInputError(
                f"Config {self.id} ends {self.effective_to} before it starts {self.effective_from}"
            )

    def covers(self, on_date: date) -> bool:
        if on_date < self.effective_from:
            return False
        return self.effective_to is None or on_date <= self.effective_to

    @property
    def is_open(self) -> bool:
        return self.effective_to is None

    @property
    def group(self) -> str:
        return self.distribution_group or DEFAULT_GROUP


@dataclass(frozen=True)
class Shift:
    id: str
    date: date
    employee_id: str
    role_id: str
    hours: Decimal = ZERO
    cash_tips: Decimal = ZERO
    credit_tips: Decimal = ZERO
    liquor_sales: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("hours", "cash_tips", "credit_tips", "liquor_sales"):
            value = to_decimal(getattr(self, name))
            if value < 0:
                raise TipoutInputError(f"Shift {self.id} has negative {name}: {value}")
            object.__setattr__(self, name, value)


PoolKey = Tuple[date, TipoutType, str]


@dataclass(frozen=True)
class PoolContribution:
    shift_id: str
    employee_id: str
    role_id: str
    date: date
    tipout_type: TipoutType
    group: str
    amount: Decimal


@dataclass
class Pool:
    date: date
    tipout_type: TipoutType
    group: str
    contributions: List[PoolContribution] = field(default_factory=list)

    @property
    def key(self) -> PoolKey:
        return (self.date, self.tipout_type, self.group)

    @property
    def total(self) -> Decimal:
        return sum((c.amount for c in self.contributions), ZERO)


@dataclass(frozen=True)
class TipoutDelta:
    shift_id: str
    employee_id: str
    role_id: str
    date: date
    tipout_type: TipoutType
    group: str
    amount: Decimal  # positive = received, negative = paid


@dataclass(frozen=True)
class OrphanedPool:
    date: date
    tipout_type: TipoutType
    group: str
    amount: Decimal


@dataclass(frozen=True)
class ConfigOverlap:
    role_id: str
    tipout_type: TipoutType
    first_config_id: str
    second_config_id: str
    overlap_start: date


@dataclass(frozen=True)
class PooledTips:
    shift_id: str
    cash_tips: Decimal
    credit_tips: Decimal
    tip_pool_group: Optional[str] = None


@dataclass(frozen=True)
class DailyRolePresence:
    has_host: bool = False
    has_sa: bool = False
    has_bar: bool = False


@dataclass
class EmployeeRoleSummary:
    employee_id: str
    employee_name: str
    role_id: str
    role_name: str
    total_hours: Decimal = ZERO
    total_cash_tips: Decimal = ZERO
    total_credit_tips: Decimal = ZERO
    total_gross_credit_tips: Decimal = ZERO
    total_liquor_sales: Decimal = ZERO
    total_bar_tipout: Decimal = ZERO
    total_host_tipout: Decimal = ZERO
    total_sa_tipout: Decimal = ZERO
    cash_tips_per_hour: Decimal = ZERO
    credit_tips_per_hour: Decimal = ZERO
    total_tips_per_hour: Decimal = ZERO
    base_pay_rate: Decimal = ZERO
    total_payroll_tips: Decimal = ZERO
    payroll_total: Decimal = ZERO
    tip_pool_group: Optional[str] = None

    def net_tipout(self, tipout_type: TipoutType) -> Decimal:
        return {
            TipoutType.BAR: self.total_bar_tipout,
            TipoutType.HOST: self.total_host_tipout,
            TipoutType.SA: self.total_sa_tipout,
        }[TipoutType(tipout_type)]


@dataclass
class ReportSummary:
    total_shifts: int = 0
    total_hours: Decimal = ZERO
    total_cash_tips: Decimal = ZERO
    total_credit_tips: Decimal = ZERO
    total_liquor_sales: Decimal = ZERO
    total_bar_tipout_paid: Decimal = ZERO
    total_host_tipout_paid: Decimal = ZERO
    total_sa_tipout_paid: Decimal = ZERO
    orphaned_total: Decimal = ZERO
    cash_tips_per_hour: Decimal = ZERO
    credit_tips_per_hour: Decimal = ZERO
    bar_tips_per_hour: Decimal = ZERO
    bar_cash_tips_per_hour: Decimal = ZERO
    bar_credit_tips_per_hour: Decimal = ZERO
    server_tips_per_hour: Decimal = ZERO
    server_cash_tips_per_hour: Decimal = ZERO
    server_credit_tips_per_hour: Decimal = ZERO


@dataclass
class TipoutReport:
    start: Optional[date]
    end: Optional[date]
    summaries: List[EmployeeRoleSummary]
    summary: ReportSummary
    presence: Dict[date, DailyRolePresence]
    deltas: List[TipoutDelta]
    pools: List[Pool]
    orphaned_pools: List[OrphanedPool]
    overlaps: List[ConfigOverlap]

    def summary_for(self, employee_id: str, role_id: str) -> EmployeeRoleSummary:
        for row in self.summaries:
            if row.employee_id == employee_id and row.role_id == role_id:
                return row
        raise KeyError(f"No summary for employee {employee_id} in role {role_id}")
