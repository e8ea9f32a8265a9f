"""
Tipout resolution and distribution engine.

Usage:
    engine = TipoutEngine(roles, configs_by_role, employees)
    report = engine.compute(shifts, start, end)
"""
from .engine import TipoutEngine
from .errors import MissingRoleError, TipoutError, TipoutInputError
from .models import (
    DailyRolePresence,
    Employee,
    EmployeeRoleSummary,
    ReportSummary,
    Role,
    RoleConfig,
    Shift,
    TipoutDelta,
    TipoutReport,
    TipoutType,
)
from .resolver import ConfigResolver, resolve_config
