"""CI entrypoints: one subcommand per workflow step, configured from the environment."""

from __future__ import annotations

import argparse
import os
from pathlib import Path

from ..config.settings import StageFlags, build_settings
from ..core.context import RunContext
from ..core.env import getenv, require_env
from ..core.exit_codes import ERR_FAILURES, OK
from ..core.logging import log_event
from ..reporting.dashboard import write_dashboard
from ..reporting.report import build_run_report, validate_run_report, write_run_report
from ..reporting.summary import append_summary, render_summary
from ..runners.compile import CompileRunner
from ..runners.generate import GenerateRunner
from ..runners.lint import LintRunner
from ..status.recorder import StatusRecorder, read_status, read_status_lenient
from .output import emit

_REQUIRED_ENV = {
    "lint": ("SPEC_PATH", "REPORTS_DIR", "STATUS_FILE", "REDOCLY_IMAGE", "WORKSPACE", "MATRIX_PATH"),
    "generate": (
        "SPEC_PATH",
        "REPORTS_DIR",
        "STATUS_FILE",
        "GENERATOR_IMAGE",
        "WORKSPACE",
        "MATRIX_PATH",
        "MODE",
        "SERVER_CONFIG_DIR",
        "CLIENT_CONFIG_DIR",
    ),
    "compile": ("REPORTS_DIR", "STATUS_FILE", "MATRIX_PATH"),
    "summarize": ("STATUS_FILE",),
    "dashboard": ("REPORTS_DIR", "STATUS_FILE"),
    "report": ("STATUS_FILE",),
}

_STAGE_RUNNERS = {"lint": LintRunner, "generate": GenerateRunner, "compile": CompileRunner}


def configure_stage_parsers(sub: argparse._SubParsersAction) -> None:
    sub.add_parser("lint", help="lint the spec (CI step, configured from environment)")
    sub.add_parser("generate", help="generate code for each generator config (CI step)")
    compile_p = sub.add_parser("compile", help="compile generated code via docker compose (CI step)")
    compile_p.add_argument("--jobs", type=int, help="compile targets concurrently")
    sub.add_parser("summarize", help="append the step summary and compute the run verdict (CI step)")
    sub.add_parser("dashboard", help="render reports/dashboard.html from the status file (CI step)")
    report_p = sub.add_parser("report", help="machine-readable run report")
    report_sub = report_p.add_subparsers(dest="report_cmd", required=True)
    write_p = report_sub.add_parser("write", help="write report.json from the status file")
    write_p.add_argument("--out", help="output path (default: $REPORTS_DIR/report.json)")
    validate_p = report_sub.add_parser("validate", help="validate a report.json against its schema")
    validate_p.add_argument("file")


def _require(cmd: str) -> None:
    for name in _REQUIRED_ENV[cmd]:
        require_env(name)


def _step_outcomes() -> dict[str, str]:
    return {
        "lint": getenv("LINT_OUTCOME", "success") or "success",
        "generate": getenv("GENERATE_OUTCOME", "success") or "success",
        "compile": getenv("COMPILE_OUTCOME", "success") or "success",
    }


def _write_dashboard(ctx: RunContext) -> int:
    records, errors = read_status_lenient(ctx.status_file)
    for exc in errors:
        log_event(ctx, "error", "dashboard", "status-invalid", message=exc.message)
    out = write_dashboard(ctx.reports_dir / "dashboard.html", records, base_dir=ctx.root)
    print(f"Generated reports dashboard: {out}")
    return OK


def run_stage_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    cmd = ns.cmd
    if cmd == "report" and ns.report_cmd == "validate":
        payload = validate_run_report(Path(ns.file))
        emit(
            {"schema_version": 1, "tool": "matrixctl", "status": "ok", "file": ns.file, "verdict": payload["verdict"]},
            ctx.output_format == "json",
        )
        return OK
    _require(cmd)
    if cmd in _STAGE_RUNNERS:
        cli_values = {"jobs": getattr(ns, "jobs", None)}
        settings = build_settings(cli=cli_values, env=os.environ)
        recorder = StatusRecorder(ctx.status_file, ctx)
        result = _STAGE_RUNNERS[cmd](ctx, recorder, settings).run()
        return ERR_FAILURES if result.failed else OK

    if cmd == "dashboard":
        return _write_dashboard(ctx)
    flags = StageFlags.from_env(os.environ)
    records = read_status(ctx.status_file) if ctx.status_file.exists() else None
    summary = render_summary(records, flags, _step_outcomes())
    if cmd == "summarize":
        target = getenv("GITHUB_STEP_SUMMARY")
        if target:
            append_summary(Path(target), summary)
        else:
            print(summary.text, end="")
        log_event(ctx, "info", "summary", "verdict", verdict=summary.verdict.value, failures=summary.failures)
        return summary.exit_code
    out = Path(ns.out) if ns.out else ctx.reports_dir / "report.json"
    write_run_report(out, build_run_report(ctx.run_id, records or [], summary))
    print(f"wrote {out}")
    return OK
