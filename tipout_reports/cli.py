from __future__ import annotations

import argparse
import json
from datetime import date
from pathlib import Path

from app.core.logging import configure_cli_logging

from .audit import AuditLogger
from .data import compute_report, load_store_snapshot
from .exporter import export_report
from .reports import REPORT_BUILDERS, ReportRequest, build_report


DEFAULT_STORE_PATH = Path("data/store.json")
REPORT_CHOICES = sorted(REPORT_BUILDERS)


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def run_report(args: argparse.Namespace) -> None:
    store_path = Path(args.store) if args.store else DEFAULT_STORE_PATH
    snapshot = load_store_snapshot(store_path, parse_date(args.start_date), parse_date(args.end_date))
    report = compute_report(snapshot)
    request = ReportRequest(
        report_type=args.report,
        employee_ids=args.employee,
        role_names=args.role,
        tipout_types=args.tipout_type,
    )
    rows = build_report(request, report)
    if args.output:
        output_path = Path(args.output)
        export_report(rows, output_path, title=args.report)
        print(f"Report exported to {output_path}")
    else:
        print(json.dumps(rows, default=str, indent=2))

    AuditLogger().log_run(
        args.report,
        {
            "start_date": args.start_date,
            "end_date": args.end_date,
            "employees": args.employee,
            "roles": args.role,
            "tipout_types": args.tipout_type,
        },
        orphaned_pools=len(report.orphaned_pools),
        output=args.output,
    )


def show_audit(args: argparse.Namespace) -> None:
    records = AuditLogger().read(args.report)
    print(json.dumps(records, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tipout reporting utility")
    parser.add_argument("--log-level", default="WARNING", help="Level of log events written to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_cmd = subparsers.add_parser("run-report", help="Compute tipouts and print or export a report")
    run_cmd.add_argument("--report", choices=REPORT_CHOICES, required=True)
    run_cmd.add_argument("--start-date", required=True)
    run_cmd.add_argument("--end-date", required=True)
    run_cmd.add_argument("--employee", action="append")
    run_cmd.add_argument("--role", action="append", help="Role name")
    run_cmd.add_argument("--tipout-type", action="append", choices=["bar", "host", "sa"])
    run_cmd.add_argument("--store", help=f"Data file (default {DEFAULT_STORE_PATH})")
    run_cmd.add_argument("--output", help="Output file (csv or pdf)")
    run_cmd.set_defaults(func=run_report)

    audit_cmd = subparsers.add_parser("audit", help="Show audit log")
    audit_cmd.add_argument("--report", choices=REPORT_CHOICES, help="Only runs of this report")
    audit_cmd.set_defaults(func=show_audit)

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
