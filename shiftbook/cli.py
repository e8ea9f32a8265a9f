from __future__ import annotations
import argparse
from datetime import date
from pathlib import Path
from uuid import uuid4

from app.core.logging import configure_cli_logging
from tipout.models import Employee, Role, Shift, TipoutType, to_decimal

from .csv_io import export_shifts, import_shifts
from .role_configs import end_config, supersede_config, tip_pool_groups
from .storage import DataStore
from .views import format_shift_log


DEFAULT_DATA_PATH = Path("data/store.json")


def store_from_args(args: argparse.Namespace) -> DataStore:
    return DataStore(Path(args.store) if getattr(args, "store", None) else DEFAULT_DATA_PATH)


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def cmd_add_employee(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    employee = Employee(id=args.id or str(uuid4()), name=args.name, default_role_id=args.default_role)
    store.add_employee(employee)
    store.save()
    print(f"Added employee {employee.id} ({employee.name})")


def cmd_add_role(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    role = Role(id=args.id or str(uuid4()), name=args.name, base_pay_rate=to_decimal(args.base_pay))
    store.add_role(role)
    store.save()
    print(f"Added role {role.id} ({role.name}) at {role.base_pay_rate}/h")


def cmd_set_config(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    config = supersede_config(
        store,
        args.role,
        TipoutType(args.tipout_type),
        as_of=parse_date(args.as_of) if args.as_of else date.today(),
        percentage_rate=to_decimal(args.rate),
        receives_tipout=args.receives,
        pays_tipout=not args.no_pay,
        distribution_group=args.distribution_group,
        tip_pool_group=args.tip_pool_group,
        base_pay_rate=to_decimal(args.base_pay) if args.base_pay is not None else None,
    )
    print(f"Config {config.id}: {config.tipout_type.value} at {config.percentage_rate} from {config.effective_from}")


def cmd_end_config(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    as_of = parse_date(args.as_of) if args.as_of else date.today()
    ended = end_config(store, args.role, TipoutType(args.tipout_type), as_of=as_of)
    print(f"Ended {len(ended)} {args.tipout_type} config(s) for role {args.role}")


def cmd_add_shift(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    shift = Shift(
        id=args.id or str(uuid4()),
        date=parse_date(args.date),
        employee_id=args.employee,
        role_id=args.role,
        hours=to_decimal(args.hours),
        cash_tips=to_decimal(args.cash),
        credit_tips=to_decimal(args.credit),
        liquor_sales=to_decimal(args.liquor),
    )
    store.add_shift(shift)
    store.save()
    print(f"Created shift {shift.id} for {shift.hours} hours on {shift.date}")


def cmd_list_shifts(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    shifts = store.find_shifts(args.employee, args.role)
    start = parse_date(args.start) if args.start else None
    end = parse_date(args.end) if args.end else None
    print(format_shift_log(shifts, store.employees, store.roles, start, end))


def cmd_export(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    path = Path(args.path)
    export_shifts(path, store.find_shifts(args.employee))
    print(f"Exported shifts to {path}")


def cmd_import(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    path = Path(args.path)
    shifts = import_shifts(path)
    for shift in shifts:
        store.add_shift(shift)
    store.save()
    print(f"Imported {len(shifts)} shifts from {path}")


def cmd_pool_groups(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    for group in tip_pool_groups(store):
        print(group)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shift and tipout rule bookkeeping")
    parser.add_argument("--store", help=f"Data file (default {DEFAULT_DATA_PATH})")
    parser.add_argument("--log-level", default="WARNING", help="Level of log events written to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    employee = sub.add_parser("add-employee", help="Add an employee")
    employee.add_argument("name")
    employee.add_argument("--id")
    employee.add_argument("--default-role")
    employee.set_defaults(func=cmd_add_employee)

    role = sub.add_parser("add-role", help="Add a role")
    role.add_argument("name")
    role.add_argument("--id")
    role.add_argument("--base-pay", default="0", help="Default hourly base pay")
    role.set_defaults(func=cmd_add_role)

    set_config = sub.add_parser("set-config", help="Start a new tipout rule for a role")
    set_config.add_argument("role")
    set_config.add_argument("tipout_type", choices=[t.value for t in TipoutType])
    set_config.add_argument("rate", help="Fraction between 0 and 1, e.g. 0.05")
    set_config.add_argument("--as-of", help="First day the rule applies (default today)")
    set_config.add_argument("--receives", action="store_true", help="Role receives this tipout")
    set_config.add_argument("--no-pay", action="store_true", help="Role does not pay this tipout")
    set_config.add_argument("--distribution-group")
    set_config.add_argument("--tip-pool-group")
    set_config.add_argument("--base-pay")
    set_config.set_defaults(func=cmd_set_config)

    end = sub.add_parser("end-config", help="Stop a role's current tipout rule")
    end.add_argument("role")
    end.add_argument("tipout_type", choices=[t.value for t in TipoutType])
    end.add_argument("--as-of", help="First day the rule no longer applies (default today)")
    end.set_defaults(func=cmd_end_config)

    add_shift = sub.add_parser("add-shift", help="Record a shift")
    add_shift.add_argument("employee")
    add_shift.add_argument("role")
    add_shift.add_argument("date")
    add_shift.add_argument("hours")
    add_shift.add_argument("--cash", default="0")
    add_shift.add_argument("--credit", default="0")
    add_shift.add_argument("--liquor", default="0")
    add_shift.add_argument("--id")
    add_shift.set_defaults(func=cmd_add_shift)

    list_shifts = sub.add_parser("list-shifts", help="Render the shift log")
    list_shifts.add_argument("--employee")
    list_shifts.add_argument("--role")
    list_shifts.add_argument("--start")
    list_shifts.add_argument("--end")
    list_shifts.set_defaults(func=cmd_list_shifts)

    export = sub.add_parser("export-shifts", help="Export shifts to CSV")
    export.add_argument("path")
    export.add_argument("--employee")
    export.set_defaults(func=cmd_export)

    imp = sub.add_parser("import-shifts", help="Import shifts from CSV")
    imp.add_argument("path")
    imp.set_defaults(func=cmd_import)

    groups = sub.add_parser("pool-groups", help="List tip pool groups in use")
    groups.set_defaults(func=cmd_pool_groups)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(args.log_level)
    try:
        args.func(args)
    except (KeyError, ValueError, FileNotFoundError) as exc:
        parser.error(str(exc.args[0]) if exc.args else str(exc))


if __name__ == "__main__":
    main()
