from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from .distribution import allocate
from .models import ZERO, PooledTips, Shift, TipoutDelta, TipoutType
from .resolver import ConfigResolver

GroupKey = Tuple[date, str]

# Tipouts a tip pool pays out of its shared credit tips.
POOL_PAID_TIPOUTS = (TipoutType.HOST, TipoutType.SA)


def pool_members(shifts: Iterable[Shift], resolver: ConfigResolver) -> Dict[GroupKey, List[Shift]]:
    """Shifts grouped by (date, tip pool group); shifts outside any group are left out."""
    groups: Dict[GroupKey, List[Shift]] = defaultdict(list)
    for shift in shifts:
        group = resolver.resolve_tip_pool_group(shift.role_id, shift.date)
        if group:
            groups[(shift.date, group)].append(shift)
    return groups


def _hours(members: List[Shift]) -> Decimal:
    return sum((s.hours for s in members), ZERO)


def pool_tips(shifts: Iterable[Shift], resolver: ConfigResolver) -> Dict[str, PooledTips]:
    """Share collected tips among shifts of the same tip pool group and day.

    Members get the group's cash and credit tips in proportion to their hours.
    Shifts outside any group keep what they collected, and so does a group
    whose members logged no hours.
    """
    shift_list = list(shifts)
    groups = pool_members(shift_list, resolver)
    pooled: Dict[str, PooledTips] = {
        shift.id: PooledTips(shift.id, shift.cash_tips, shift.credit_tips) for shift in shift_list
    }

    for (_, group), members in groups.items():
        if _hours(members) == 0:
            for shift in members:
                pooled[shift.id] = PooledTips(shift.id, shift.cash_tips, shift.credit_tips, group)
            continue
        weights = [(shift, shift.hours) for shift in members]
        cash = allocate(sum((s.cash_tips for s in members), ZERO), weights)
        credit = allocate(sum((s.credit_tips for s in members), ZERO), weights)
        for shift in members:
            pooled[shift.id] = PooledTips(shift.id, cash[shift.id], credit[shift.id], group)
    return pooled


def share_pool_tipouts(
    deltas: Iterable[TipoutDelta], shifts: Iterable[Shift], resolver: ConfigResolver
) -> List[TipoutDelta]:
    """Spread the host and SA tipouts paid by tip pool members across the pool.

    A pool hands out its credit tips net of those tipouts, so each member
    carries them in proportion to hours, exactly like the tips themselves.
    Per distribution pool the paid total is unchanged. Bar tipouts stay with
    the shift that rang up the liquor sales, and pools without hours keep
    each member's own payment.
    """
    groups = {key: members for key, members in pool_members(shifts, resolver).items() if _hours(members)}
    member_of = {shift.id: key for key, members in groups.items() for shift in members}

    result: List[TipoutDelta] = []
    shared: Dict[Tuple[GroupKey, TipoutType, str], Decimal] = defaultdict(lambda: ZERO)
    for delta in deltas:
        key = member_of.get(delta.shift_id)
        if key is None or delta.amount >= 0 or delta.tipout_type not in POOL_PAID_TIPOUTS:
            result.append(delta)
            continue
        shared[(key, delta.tipout_type, delta.group)] += delta.amount

    for (key, tipout_type, group), amount in shared.items():
        members = groups[key]
        shares = allocate(-amount, [(shift, shift.hours) for shift in members])
        for shift in members:
            if not shares[shift.id]:
                continue
            result.append(
                TipoutDelta(
                    shift_id=shift.id,
                    employee_id=shift.employee_id,
                    role_id=shift.role_id,
                    date=shift.date,
                    tipout_type=tipout_type,
                    group=group,
                    amount=-shares[shift.id],
                )
            )
    return result
