from __future__ import annotations
import json
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

from tipout.models import Employee, Role, RoleConfig, Shift


class DataStore:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.employees: Dict[str, Employee] = {}
        self.roles: Dict[str, Role] = {}
        self.role_configs: Dict[str, RoleConfig] = {}
        self.shifts: Dict[str, Shift] = {}
        if path.exists():
            self.load()

    def load(self) -> None:
        content = json.loads(self.path.read_text())
        self.employees = {e["id"]: Employee(**e) for e in content.get("employees", [])}
        self.roles = {r["id"]: Role(**r) for r in content.get("roles", [])}
        self.role_configs = {c["id"]: self._deserialize_config(c) for c in content.get("role_configs", [])}
        self.shifts = {s["id"]: self._deserialize_shift(s) for s in content.get("shifts", [])}

    def save(self) -> None:
        payload = {
            "employees": [asdict(e) for e in self.employees.values()],
            "roles": [asdict(r) for r in self.roles.values()],
            "role_configs": [self._serialize_config(c) for c in self.role_configs.values()],
            "shifts": [asdict(s) for s in self.shifts.values()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, default=self._serializer, indent=2))

    def add_employee(self, employee: Employee) -> None:
        self.employees[employee.id] = employee

    def add_role(self, role: Role) -> None:
        self.roles[role.id] = role

    def put_config(self, config: RoleConfig) -> None:
        if config.role_id not in self.roles:
            raise KeyError(f"Role {config.role_id} not found")
        self.role_configs[config.id] = config

    def remove_config(self, config_id: str) -> None:
        del self.role_configs[config_id]

    def add_shift(self, shift: Shift) -> None:
        if shift.employee_id not in self.employees:
            raise KeyError(f"Employee {shift.employee_id} not found")
        if shift.role_id not in self.roles:
            raise KeyError(f"Role {shift.role_id} not found")
        self.shifts[shift.id] = shift

    def remove_shift(self, shift_id: str) -> None:
        del self.shifts[shift_id]

    def configs_for(self, role_id: str) -> List[RoleConfig]:
        configs = [c for c in self.role_configs.values() if c.role_id == role_id]
        return sorted(configs, key=lambda c: (c.tipout_type.value, c.effective_from, c.id))

    def configs_by_role(self) -> Dict[str, List[RoleConfig]]:
        """Configuration history for every role, including roles with none."""

        return {role_id: self.configs_for(role_id) for role_id in self.roles}

    def find_shifts(self, employee_id: Optional[str] = None, role_id: Optional[str] = None) -> List[Shift]:
        shifts = list(self.shifts.values())
        if employee_id:
            shifts = [s for s in shifts if s.employee_id == employee_id]
        if role_id:
            shifts = [s for s in shifts if s.role_id == role_id]
        return sorted(shifts, key=lambda s: (s.date, s.id))

    def shifts_between(self, start: date, end: date) -> List[Shift]:
        return [s for s in self.find_shifts() if start <= s.date <= end]

    def list_employees(self) -> List[Employee]:
        """Return employees ordered by display name."""

        return sorted(self.employees.values(), key=lambda e: e.name.lower())

    @staticmethod
    def _serializer(value):
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, Decimal):
            return str(value)
        raise TypeError(f"Type {type(value)} not serializable")

    @staticmethod
    def _parse_date(value: str) -> date:
        return date.fromisoformat(value)

    def _serialize_config(self, config: RoleConfig) -> dict:
        payload = asdict(config)
        payload["tipout_type"] = config.tipout_type.value
        return payload

    def _deserialize_config(self, data: dict) -> RoleConfig:
        data["effective_from"] = self._parse_date(data["effective_from"])
        if data.get("effective_to"):
            data["effective_to"] = self._parse_date(data["effective_to"])
        return RoleConfig(**data)

    def _deserialize_shift(self, data: dict) -> Shift:
        data["date"] = self._parse_date(data["date"])
        return Shift(**data)
