from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from .clock import build_run_id
from .env import getenv

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    root: Path
    reports_dir: Path
    status_file: Path
    output_format: OutputFormat = "text"
    verbose: bool = False
    quiet: bool = False
    log_json: bool = False

    @property
    def in_github_actions(self) -> bool:
        return (getenv("GITHUB_ACTIONS", "") or "").lower() == "true"

    def with_reports(self, reports_dir: Path, status_file: Path | None = None) -> "RunContext":
        return replace(self, reports_dir=reports_dir, status_file=status_file or reports_dir / "status.tsv")

    @classmethod
    def from_args(
        cls,
        run_id: str | None = None,
        root: str | None = None,
        reports_dir: str | None = None,
        status_file: str | None = None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
    ) -> "RunContext":
        resolved_root = Path(root or getenv("WORKSPACE") or Path.cwd()).resolve()
        resolved_run_id = run_id or getenv("RUN_ID") or build_run_id()
        raw_reports = Path(reports_dir or getenv("REPORTS_DIR") or "reports")
        resolved_reports = raw_reports if raw_reports.is_absolute() else resolved_root / raw_reports
        raw_status = status_file or getenv("STATUS_FILE")
        if raw_status:
            resolved_status = Path(raw_status) if Path(raw_status).is_absolute() else resolved_root / raw_status
        else:
            resolved_status = resolved_reports / "status.tsv"
        return cls(
            run_id=resolved_run_id,
            root=resolved_root,
            reports_dir=resolved_reports,
            status_file=resolved_status,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
        )
