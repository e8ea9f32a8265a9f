from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

AUDIT_LOG = Path("audit_log.jsonl")


class AuditLogger:
    """Append-only JSONL trail of report runs, one record per line."""

    def __init__(self, path: Path = AUDIT_LOG):
        self.path = path

    def log(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        record = {**entry, "timestamp": datetime.now(timezone.utc).isoformat()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, default=str) + "\n")
        return record

    def log_run(
        self,
        report_type: str,
        filters: Dict[str, Any],
        *,
        orphaned_pools: int,
        output: Optional[str] = None,
        action: str = "manual-run",
    ) -> Dict[str, Any]:
        return self.log(
            {
                "action": action,
                "report_type": report_type,
                "filters": {key: value for key, value in filters.items() if value},
                "orphaned_pools": orphaned_pools,
                "output": output or "stdout",
            }
        )

    def read(self, report_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as handle:
            records = [json.loads(line) for line in handle if line.strip()]
        if report_type:
            records = [r for r in records if r.get("report_type") == report_type]
        return records
