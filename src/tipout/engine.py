from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

import structlog

from .distribution import distribute
from .errors import MissingRoleError, TipoutInputError
from .models import Employee, Role, RoleConfig, Shift, TipoutReport, TipoutType
from .pools import ContributionBase, accumulate
from .resolver import ConfigResolver
from .summary import daily_presence, overall_summary, summarize
from .tip_pools import pool_tips, share_pool_tipouts

logger = structlog.get_logger(__name__)


class TipoutEngine:
    """Runs a full tipout pass over one snapshot of shifts and role history.

    The engine keeps no state between calls; each ``compute`` works only on
    the records it is handed, so separate requests can run side by side.
    """

    def __init__(
        self,
        roles: Mapping[str, Role],
        role_configs: Mapping[str, Iterable[RoleConfig]],
        employees: Optional[Mapping[str, Employee]] = None,
        bases: Optional[Mapping[TipoutType, ContributionBase]] = None,
    ):
        self.resolver = ConfigResolver(role_configs, roles)
        self.employees: Dict[str, Employee] = dict(employees or {})
        self.bases = bases

    def _validate(self, shifts: List[Shift], start: Optional[date], end: Optional[date]) -> None:
        if start and end and start > end:
            raise TipoutInputError(f"Report range starts {start} after it ends {end}")
        seen = set()
        for shift in shifts:
            if shift.id in seen:
                raise TipoutInputError(f"Shift {shift.id} supplied more than once")
            seen.add(shift.id)
            if not self.resolver.has_role(shift.role_id):
                raise MissingRoleError(shift.role_id, shift.id)
            if (start and shift.date < start) or (end and shift.date > end):
                raise TipoutInputError(f"Shift {shift.id} on {shift.date} falls outside {start} - {end}")

    def compute(self, shifts: Iterable[Shift], start: Optional[date] = None, end: Optional[date] = None) -> TipoutReport:
        shift_list = sorted(shifts, key=lambda s: (s.date, s.id))
        self._validate(shift_list, start, end)

        overlaps = self.resolver.overlaps()
        for overlap in overlaps:
            logger.warning(
                "config_overlap",
                role_id=overlap.role_id,
                tipout_type=overlap.tipout_type.value,
                first_config_id=overlap.first_config_id,
                second_config_id=overlap.second_config_id,
                overlap_start=overlap.overlap_start.isoformat(),
            )

        shifts_by_date: Dict[date, List[Shift]] = defaultdict(list)
        for shift in shift_list:
            shifts_by_date[shift.date].append(shift)

        pooled = pool_tips(shift_list, self.resolver)
        pools = accumulate(shift_list, self.resolver, self.bases)
        distribution = distribute(pools, shifts_by_date, self.resolver)
        deltas = share_pool_tipouts(distribution.deltas, shift_list, self.resolver)

        report = TipoutReport(
            start=start,
            end=end,
            summaries=summarize(
                shift_list,
                deltas,
                self.resolver,
                start=start,
                end=end,
                pooled=pooled,
                employees=self.employees,
            ),
            summary=overall_summary(
                shift_list, deltas, self.resolver, pooled=pooled, orphaned=distribution.orphaned
            ),
            presence=daily_presence(shift_list, self.resolver),
            deltas=deltas,
            pools=list(pools.values()),
            orphaned_pools=distribution.orphaned,
            overlaps=overlaps,
        )
        logger.info(
            "tipout_report_computed",
            start=start.isoformat() if start else None,
            end=end.isoformat() if end else None,
            shifts=len(shift_list),
            pools=len(pools),
            deltas=len(deltas),
            orphaned_pools=len(distribution.orphaned),
        )
        return report
