from __future__ import annotations
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List
from uuid import uuid4

from tipout.errors import TipoutInputError
from tipout.models import RoleConfig, TipoutType
from tipout.resolver import find_overlaps, resolve_config

from .storage import DataStore


def _close(store: DataStore, config: RoleConfig, as_of: date) -> RoleConfig | None:
    # Starting on as_of it would end before it starts: the rule is replaced outright.
    if config.effective_from >= as_of:
        store.remove_config(config.id)
        return None
    ended = replace(config, effective_to=as_of - timedelta(days=1))
    store.put_config(ended)
    return ended


def history_of(store: DataStore, role_id: str, tipout_type: TipoutType) -> List[RoleConfig]:
    tipout_type = TipoutType(tipout_type)
    return [c for c in store.configs_for(role_id) if c.tipout_type == tipout_type]


def end_config(store: DataStore, role_id: str, tipout_type: TipoutType, *, as_of: date) -> List[RoleConfig]:
    """Stop the config of ``tipout_type`` in force on ``as_of`` so it no longer applies from then.

    Rules scheduled to start after ``as_of`` are left alone.
    """
    if role_id not in store.roles:
        raise KeyError(f"Role {role_id} not found")
    ended = []
    for config in history_of(store, role_id, tipout_type):
        if not config.covers(as_of):
            continue
        closed = _close(store, config, as_of)
        if closed is not None:
            ended.append(closed)
    store.save()
    return ended


def supersede_config(
    store: DataStore,
    role_id: str,
    tipout_type: TipoutType,
    *,
    as_of: date,
    percentage_rate: Decimal,
    receives_tipout: bool = False,
    pays_tipout: bool = True,
    distribution_group: str | None = None,
    tip_pool_group: str | None = None,
    base_pay_rate: Decimal | None = None,
    config_id: str | None = None,
) -> RoleConfig:
    """Replace the current rule for ``tipout_type`` with a new one starting ``as_of``.

    The config in force on ``as_of`` keeps its window up to the day before.
    A rule already scheduled after ``as_of`` stays, and the new config ends
    the day before it starts; otherwise the new config is open-ended.
    """
    if role_id not in store.roles:
        raise KeyError(f"Role {role_id} not found")
    history = history_of(store, role_id, tipout_type)
    scheduled = [c.effective_from for c in history if c.effective_from > as_of]

    config = RoleConfig(
        id=config_id or str(uuid4()),
        role_id=role_id,
        tipout_type=tipout_type,
        percentage_rate=percentage_rate,
        effective_from=as_of,
        effective_to=min(scheduled) - timedelta(days=1) if scheduled else None,
        receives_tipout=receives_tipout,
        pays_tipout=pays_tipout,
        distribution_group=distribution_group or None,
        tip_pool_group=tip_pool_group or None,
        base_pay_rate=base_pay_rate,
    )
    remaining = [c for c in history if not c.covers(as_of)] + [
        replace(c, effective_to=as_of - timedelta(days=1))
        for c in history
        if c.covers(as_of) and c.effective_from < as_of
    ]
    for overlap in find_overlaps(role_id, remaining + [config]):
        if config.id in (overlap.first_config_id, overlap.second_config_id):
            raise TipoutInputError(
                f"Config {config.id} would overlap another {config.tipout_type.value} rule from {overlap.overlap_start}"
            )

    for existing in history:
        if existing.covers(as_of):
            _close(store, existing, as_of)
    store.put_config(config)
    store.save()
    return config


def current_configs(store: DataStore, role_id: str) -> List[RoleConfig]:
    if role_id not in store.roles:
        raise KeyError(f"Role {role_id} not found")
    configs = [c for c in store.configs_for(role_id) if c.is_open]
    return sorted(configs, key=lambda c: c.effective_from, reverse=True)


def tip_pool_groups(store: DataStore) -> List[str]:
    return sorted({c.tip_pool_group for c in store.role_configs.values() if c.tip_pool_group})


def current_rates(store: DataStore, role_ids: Iterable[str], on_date: date) -> Dict[str, Dict[str, Decimal]]:
    """Percentage rate per tipout type for each role, keyed by role name."""
    rates: Dict[str, Dict[str, Decimal]] = {}
    for role_id in sorted(set(role_ids)):
        role = store.roles[role_id]
        history = store.configs_for(role_id)
        rates[role.name] = {}
        for tipout_type in TipoutType:
            config = resolve_config(history, tipout_type, on_date)
            rates[role.name][tipout_type.value] = config.percentage_rate if config else Decimal("0")
    return rates
