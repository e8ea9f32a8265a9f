from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import MissingRoleError
from .models import ZERO, ConfigOverlap, Role, RoleConfig, TipoutType


def _latest(candidates: List[RoleConfig]) -> Optional[RoleConfig]:
    if not candidates:
        return None
    # Overlapping intervals should not happen; the newest rule wins when they do.
    return max(candidates, key=lambda c: (c.effective_from, c.id))


def resolve_config(configs: Iterable[RoleConfig], tipout_type: TipoutType, on_date: date) -> Optional[RoleConfig]:
    """Return the config of ``tipout_type`` effective on ``on_date``, or None."""
    tipout_type = TipoutType(tipout_type)
    return _latest([c for c in configs if c.tipout_type == tipout_type and c.covers(on_date)])


def find_overlaps(role_id: str, configs: Iterable[RoleConfig]) -> List[ConfigOverlap]:
    by_type: Dict[TipoutType, List[RoleConfig]] = defaultdict(list)
    for config in configs:
        by_type[config.tipout_type].append(config)

    overlaps: List[ConfigOverlap] = []
    for tipout_type, history in by_type.items():
        ordered = sorted(history, key=lambda c: (c.effective_from, c.id))
        for index, first in enumerate(ordered):
            for second in ordered[index + 1:]:
                # sorted by start, so second starts inside first unless first ended earlier
                if first.effective_to is not None and second.effective_from > first.effective_to:
                    break
                overlaps.append(
                    ConfigOverlap(
                        role_id=role_id,
                        tipout_type=tipout_type,
                        first_config_id=first.id,
                        second_config_id=second.id,
                        overlap_start=second.effective_from,
                    )
                )
    return overlaps


class ConfigResolver:
    """Answers "which rule applied on this date" for every role in a snapshot."""

    def __init__(self, role_configs: Mapping[str, Iterable[RoleConfig]], roles: Optional[Mapping[str, Role]] = None):
        self.role_configs: Dict[str, List[RoleConfig]] = {
            role_id: list(configs) for role_id, configs in role_configs.items()
        }
        self.roles: Dict[str, Role] = dict(roles or {})

    def has_role(self, role_id: str) -> bool:
        return role_id in self.role_configs

    def configs_for(self, role_id: str) -> List[RoleConfig]:
        try:
            return self.role_configs[role_id]
        except KeyError:
            raise MissingRoleError(role_id) from None

    def resolve(self, role_id: str, tipout_type: TipoutType, on_date: date) -> Optional[RoleConfig]:
        return resolve_config(self.configs_for(role_id), tipout_type, on_date)

    def receives(self, role_id: str, tipout_type: TipoutType, on_date: date) -> bool:
        config = self.resolve(role_id, tipout_type, on_date)
        return config is not None and config.receives_tipout

    def pays(self, role_id: str, tipout_type: TipoutType, on_date: date) -> bool:
        config = self.resolve(role_id, tipout_type, on_date)
        return config is not None and config.pays_tipout

    def resolve_base_pay(self, role_id: str, on_date: date) -> Decimal:
        config = _latest(
            [c for c in self.configs_for(role_id) if c.base_pay_rate is not None and c.covers(on_date)]
        )
        if config is not None:
            return config.base_pay_rate
        role = self.roles.get(role_id)
        return role.base_pay_rate if role else ZERO

    def resolve_tip_pool_group(self, role_id: str, on_date: date) -> Optional[str]:
        config = _latest([c for c in self.configs_for(role_id) if c.tip_pool_group and c.covers(on_date)])
        return config.tip_pool_group if config else None

    def role_name(self, role_id: str) -> str:
        role = self.roles.get(role_id)
        return role.name if role else role_id

    def overlaps(self) -> List[ConfigOverlap]:
        found: List[ConfigOverlap] = []
        for role_id in sorted(self.role_configs):
            found.extend(find_overlaps(role_id, self.role_configs[role_id]))
        return found
