from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import structlog

from .models import (
    DEFAULT_GROUP,
    ZERO,
    OrphanedPool,
    Pool,
    PoolKey,
    Shift,
    TipoutDelta,
    TipoutType,
    quantize,
)
from .resolver import ConfigResolver

logger = structlog.get_logger(__name__)


@dataclass
class Distribution:
    deltas: List[TipoutDelta] = field(default_factory=list)
    orphaned: List[OrphanedPool] = field(default_factory=list)


def allocate(total: Decimal, members: Sequence[Tuple[Shift, Decimal]]) -> Dict[str, Decimal]:
    """Split ``total`` across shifts in proportion to their weights.

    Shares are rounded to the cent and whatever is left over goes to the
    largest share (then most hours, then smallest employee id) so the shares
    always add back up to ``total``. Zero total weight splits evenly.
    """
    if not members:
        return {}
    weight_total = sum((weight for _, weight in members), ZERO)
    if weight_total == 0:
        members = [(shift, Decimal(1)) for shift, _ in members]
        weight_total = Decimal(len(members))

    raw = {shift.id: total * weight / weight_total for shift, weight in members}
    shares = {shift_id: quantize(value) for shift_id, value in raw.items()}
    residual = total - sum(shares.values(), ZERO)
    if residual:
        target = min(
            (shift for shift, _ in members),
            key=lambda s: (-raw[s.id], -s.hours, s.employee_id, s.id),
        )
        shares[target.id] += residual
    return shares


def eligible_receivers(pool: Pool, shifts: Iterable[Shift], resolver: ConfigResolver) -> List[Shift]:
    receivers: List[Tuple[Shift, str]] = []
    for shift in shifts:
        config = resolver.resolve(shift.role_id, pool.tipout_type, shift.date)
        if config is not None and config.receives_tipout:
            receivers.append((shift, config.group))

    matched = [shift for shift, group in receivers if group == pool.group]
    if not matched and pool.group == DEFAULT_GROUP:
        # Payers that name no group feed whoever receives this tipout type today.
        matched = [shift for shift, _ in receivers]
    return sorted(matched, key=lambda s: (s.employee_id, s.id))


def _pool_sort_key(key: PoolKey) -> Tuple[date, str, str]:
    day, tipout_type, group = key
    return (day, TipoutType(tipout_type).value, group)


def distribute(
    pools: Mapping[PoolKey, Pool],
    shifts_by_date: Mapping[date, Sequence[Shift]],
    resolver: ConfigResolver,
) -> Distribution:
    result = Distribution()
    for key in sorted(pools, key=_pool_sort_key):
        pool = pools[key]
        for contribution in pool.contributions:
            result.deltas.append(
                TipoutDelta(
                    shift_id=contribution.shift_id,
                    employee_id=contribution.employee_id,
                    role_id=contribution.role_id,
                    date=contribution.date,
                    tipout_type=contribution.tipout_type,
                    group=contribution.group,
                    amount=-contribution.amount,
                )
            )

        total = pool.total
        receivers = eligible_receivers(pool, shifts_by_date.get(pool.date, ()), resolver)
        if not receivers:
            if total:
                logger.warning(
                    "orphaned_pool",
                    date=pool.date.isoformat(),
                    tipout_type=pool.tipout_type.value,
                    group=pool.group,
                    amount=str(total),
                )
                result.orphaned.append(
                    OrphanedPool(date=pool.date, tipout_type=pool.tipout_type, group=pool.group, amount=total)
                )
            continue

        shares = allocate(total, [(shift, shift.hours) for shift in receivers])
        for shift in receivers:
            amount = shares[shift.id]
            if not amount:
                continue
            result.deltas.append(
                TipoutDelta(
                    shift_id=shift.id,
                    employee_id=shift.employee_id,
                    role_id=shift.role_id,
                    date=shift.date,
                    tipout_type=pool.tipout_type,
                    group=pool.group,
                    amount=amount,
                )
            )
    return result
