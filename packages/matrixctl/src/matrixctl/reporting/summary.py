"""Markdown step summary and the run-level pass/fail verdict."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping

from ..config.settings import REPORTS_ARTIFACT, StageFlags
from ..core.exit_codes import ERR_FAILURES, ERR_UNREPORTED, OK
from ..status.model import STAGE_ORDER, Scope, Stage, StatusRecord, count_failures

TITLE = "## OpenAPI Tools Results"

_TARGET_COLUMN = {
    Stage.LINT: "Tool",
    Stage.GENERATE: "Generator",
    Stage.COMPILE: "Target",
}


class Verdict(str, Enum):
    OK = "ok"
    RECORDED_FAILURES = "recorded_failures"
    UNREPORTED_STAGE = "unreported_stage"
    MISSING_STATUS = "missing_status"


@dataclass(frozen=True)
class SummaryReport:
    text: str
    verdict: Verdict
    failures: int
    unreported: tuple[Stage, ...] = ()

    @property
    def ok(self) -> bool:
        return self.verdict is Verdict.OK

    @property
    def exit_code(self) -> int:
        if self.verdict is Verdict.OK:
            return OK
        if self.verdict is Verdict.UNREPORTED_STAGE:
            return ERR_UNREPORTED
        return ERR_FAILURES


def _cell(value: str) -> str:
    return value.replace("|", "\\|")


def unreported_stages(
    records: list[StatusRecord],
    flags: StageFlags,
    step_outcomes: Mapping[str, str] | None = None,
) -> tuple[Stage, ...]:
    """Enabled stages that never wrote a record or whose step failed without recording it."""
    step_outcomes = step_outcomes or {}
    reported = {record.stage for record in records}
    failed_with_record = {record.stage for record in records if not record.ok}
    missing = []
    for stage in STAGE_ORDER:
        if not flags.enabled(stage.value):
            continue
        if stage not in reported:
            missing.append(stage)
        elif step_outcomes.get(stage.value) == "failure" and stage not in failed_with_record:
            missing.append(stage)
    return tuple(missing)


def _stage_tables(records: list[StatusRecord], stage: Stage) -> list[str]:
    lines: list[str] = []
    for scope in Scope:
        rows = [r for r in records if r.stage is stage and r.scope is scope]
        if not rows:
            continue
        title = stage.title if stage is Stage.LINT and scope is Scope.SPEC else f"{stage.title} ({scope.value})"
        lines.extend([f"### {title}", "", f"| {_TARGET_COLUMN[stage]} | Status | Log |", "|---|---|---|"])
        lines.extend(f"| {_cell(r.target)} | {r.outcome.value} | {_cell(r.log_path)} |" for r in rows)
        lines.append("")
    return lines


def render_summary(
    records: list[StatusRecord] | None,
    flags: StageFlags,
    step_outcomes: Mapping[str, str] | None = None,
) -> SummaryReport:
    """Render the step summary; `records=None` means the status file was never written."""
    lines = [TITLE, ""]
    if records is None:
        lines.extend(["No status file found.", ""])
    for stage in STAGE_ORDER:
        if records:
            lines.extend(_stage_tables(records, stage))
        if not flags.enabled(stage.value):
            lines.extend([f"### {stage.title}", "", f"Skipped (run_{stage.value}=false)", ""])
    if flags.upload:
        lines.extend([f"Reports artifact: `{REPORTS_ARTIFACT}`", ""])
    else:
        lines.extend(["Reports artifact: skipped (run_upload=false)", ""])

    if records is None:
        lines.append("Failures: 1")
        return SummaryReport("\n".join(lines) + "\n", Verdict.MISSING_STATUS, 1, ())

    failures = count_failures(records)
    missing = unreported_stages(records, flags, step_outcomes)
    if failures:
        lines.append(f"Failures: {failures}")
        verdict = Verdict.RECORDED_FAILURES
    elif missing:
        lines.append("Failures: at least one step failed before reporting status.")
        verdict = Verdict.UNREPORTED_STAGE
    else:
        verdict = Verdict.OK
    if missing:
        lines.append(f"Stages without status: {', '.join(stage.value for stage in missing)}")
    text = "\n".join(lines).rstrip("\n") + "\n"
    return SummaryReport(text, verdict, failures, missing)


def append_summary(path: Path, report: SummaryReport) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(report.text)
    return path
