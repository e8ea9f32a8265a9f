from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Dict, List

from shiftbook.storage import DataStore
from tipout.engine import TipoutEngine
from tipout.models import Employee, Role, RoleConfig, Shift, TipoutReport


@dataclass(frozen=True)
class Snapshot:
    start: date
    end: date
    employees: Dict[str, Employee]
    roles: Dict[str, Role]
    role_configs: Dict[str, List[RoleConfig]]
    shifts: List[Shift]


def load_snapshot(store: DataStore, start: date, end: date) -> Snapshot:
    if start > end:
        raise ValueError(f"Start date {start} is after end date {end}")
    return Snapshot(
        start=start,
        end=end,
        employees=dict(store.employees),
        roles=dict(store.roles),
        role_configs=store.configs_by_role(),
        shifts=store.shifts_between(start, end),
    )


def load_store_snapshot(store_path: Path, start: date, end: date) -> Snapshot:
    if not store_path.exists():
        raise FileNotFoundError(f"Store data not found at {store_path}")
    return load_snapshot(DataStore(store_path), start, end)


def compute_report(snapshot: Snapshot) -> TipoutReport:
    engine = TipoutEngine(snapshot.roles, snapshot.role_configs, snapshot.employees)
    return engine.compute(snapshot.shifts, snapshot.start, snapshot.end)
