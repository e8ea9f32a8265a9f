from __future__ import annotations

from decimal import Decimal
from typing import Callable, Dict, Iterable, Mapping, Optional

from .models import Pool, PoolContribution, PoolKey, Shift, TipoutType, quantize
from .resolver import ConfigResolver

ContributionBase = Callable[[Shift], Decimal]

# Which shift figure each tipout type is taken from.
CONTRIBUTION_BASES: Dict[TipoutType, ContributionBase] = {
    TipoutType.BAR: lambda shift: shift.liquor_sales,
    TipoutType.HOST: lambda shift: shift.credit_tips,
    TipoutType.SA: lambda shift: shift.credit_tips,
}


def contribution_for(
    shift: Shift,
    tipout_type: TipoutType,
    resolver: ConfigResolver,
    bases: Optional[Mapping[TipoutType, ContributionBase]] = None,
) -> Optional[PoolContribution]:
    config = resolver.resolve(shift.role_id, tipout_type, shift.date)
    if config is None or not config.pays_tipout:
        return None
    base = (bases or CONTRIBUTION_BASES)[tipout_type](shift)
    amount = quantize(base * config.percentage_rate)
    if not amount:
        return None
    return PoolContribution(
        shift_id=shift.id,
        employee_id=shift.employee_id,
        role_id=shift.role_id,
        date=shift.date,
        tipout_type=tipout_type,
        group=config.group,
        amount=amount,
    )


def accumulate(
    shifts: Iterable[Shift],
    resolver: ConfigResolver,
    bases: Optional[Mapping[TipoutType, ContributionBase]] = None,
) -> Dict[PoolKey, Pool]:
    """Build the daily pools every paying shift contributes to.

    Pools are keyed by (date, tipout type, distribution group) so tips never
    cross a day boundary, even for reports spanning weeks.
    """
    pools: Dict[PoolKey, Pool] = {}
    for shift in sorted(shifts, key=lambda s: (s.date, s.id)):
        for tipout_type in TipoutType:
            contribution = contribution_for(shift, tipout_type, resolver, bases)
            if contribution is None:
                continue
            key = (contribution.date, tipout_type, contribution.group)
            pool = pools.get(key)
            if pool is None:
                pool = pools[key] = Pool(date=contribution.date, tipout_type=tipout_type, group=contribution.group)
            pool.contributions.append(contribution)
    return pools
