"""Machine-readable run report, checked against the packaged JSON schema."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..core.schema import validate_json_file, validate_payload
from ..core.serialize import dumps_json
from ..status.model import StatusRecord, count_failures
from .summary import SummaryReport

REPORT_SCHEMA = "run-report.schema.json"


def build_run_report(run_id: str, records: list[StatusRecord], summary: SummaryReport) -> dict[str, Any]:
    failed = count_failures(records)
    return {
        "schema_version": 1,
        "tool": "matrixctl",
        "run_id": run_id,
        "status": "ok" if summary.ok else "fail",
        "verdict": summary.verdict.value,
        "counts": {"total": len(records), "passed": len(records) - failed, "failed": failed},
        "unreported_stages": [stage.value for stage in summary.unreported],
        "records": [record.to_payload() for record in records],
    }


def write_run_report(out: Path, payload: dict[str, Any]) -> Path:
    validate_payload(payload, REPORT_SCHEMA, source=str(out))
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(dumps_json(payload, pretty=True) + "\n", encoding="utf-8")
    return out


def validate_run_report(path: Path) -> dict[str, Any]:
    return validate_json_file(path, REPORT_SCHEMA)
