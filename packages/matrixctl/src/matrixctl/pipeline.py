"""Local runner: lint, generate and compile in sequence, then the reports."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path

from .config.settings import Settings, StageFlags
from .core.context import RunContext
from .core.errors import ConfigError
from .core.exit_codes import ERR_FAILURES, OK
from .core.logging import log_event
from .core.process import CommandRunner
from .fs import clean_outputs, prepare_reports_tree
from .reporting.console import render_closing, render_results_table
from .reporting.dashboard import write_dashboard
from .reporting.report import build_run_report, write_run_report
from .reporting.summary import SummaryReport, append_summary, render_summary
from .runners.base import Echo, StageOutcome, StageResult, StepRunner
from .runners.compile import CompileRunner
from .runners.generate import GenerateRunner
from .runners.lint import LintRunner
from .status.model import Stage, StatusRecord
from .status.recorder import StatusRecorder

_RUNNERS: tuple[tuple[Stage, type[StepRunner], str], ...] = (
    (Stage.LINT, LintRunner, "Linting spec"),
    (Stage.GENERATE, GenerateRunner, "Generating code"),
    (Stage.COMPILE, CompileRunner, "Compiling generated code"),
)


@dataclass
class PipelineResult:
    records: list[StatusRecord]
    summary: SummaryReport
    outcomes: dict[str, StageOutcome] = field(default_factory=dict)
    stage_results: dict[Stage, StageResult] = field(default_factory=dict)
    dashboard: Path | None = None
    report: Path | None = None

    @property
    def exit_code(self) -> int:
        return OK if self.summary.ok else ERR_FAILURES


def effective_flags(flags: StageFlags) -> StageFlags:
    """Compile only runs on freshly generated code."""
    return replace(flags, compile=flags.compile and flags.generate)


class Pipeline:
    def __init__(
        self,
        ctx: RunContext,
        settings: Settings,
        runner: CommandRunner | None = None,
        echo: Echo = print,
        clean: bool = False,
        step_summary: Path | None = None,
    ) -> None:
        self.ctx = ctx
        self.settings = settings
        self.runner = runner
        self.echo = echo
        self.clean = clean
        self.step_summary = step_summary
        self.recorder = StatusRecorder(ctx.status_file, ctx)

    def relative_spec(self) -> str:
        raw = Path(self.settings.spec_path)
        candidate = raw if raw.is_absolute() else self.ctx.root / raw
        if not self.settings.spec_path or not candidate.is_file():
            raise ConfigError(f"Spec file not found: {self.settings.spec_path or '<none>'}")
        try:
            return candidate.resolve().relative_to(self.ctx.root.resolve()).as_posix()
        except ValueError:
            raise ConfigError(f"Spec file must live under {self.ctx.root}: {candidate}") from None

    def validate(self) -> None:
        spec = self.relative_spec()
        if spec != self.settings.spec_path:
            self.settings = replace(self.settings, spec_path=spec)
        if not self.settings.mode_valid:
            raise ConfigError(f"Invalid mode: {self.settings.mode} (expected: server, client, both)")
        if self.runner is None and shutil.which("docker") is None:
            raise ConfigError("Docker is required but not found in PATH")

    def prepare(self) -> None:
        if self.clean:
            self.echo("Cleaning previous outputs...")
            clean_outputs(self.ctx, self.settings.matrix_root(self.ctx.root) / "generated", self.ctx.reports_dir)
        prepare_reports_tree(self.ctx.reports_dir)
        self.recorder.reset()

    def _banner(self, flags: StageFlags) -> None:
        self.echo("=== OpenAPI Tools (local) ===")
        self.echo(f"Spec:       {self.settings.spec_path}")
        self.echo(f"Mode:       {self.settings.mode}")
        self.echo(f"Lint:       {str(flags.lint).lower()}")
        self.echo(f"Generate:   {str(flags.generate).lower()}")
        self.echo(f"Compile:    {str(flags.compile).lower()}")
        self.echo("")

    def run(self) -> PipelineResult:
        self.validate()
        flags = effective_flags(self.settings.stages)
        self._banner(self.settings.stages)
        self.prepare()
        log_event(self.ctx, "info", "pipeline", "start", mode=self.settings.mode, jobs=self.settings.jobs)

        outcomes = {stage.value: StageOutcome.SKIPPED for stage, _, _ in _RUNNERS}
        stage_results: dict[Stage, StageResult] = {}
        for stage, runner_cls, heading in _RUNNERS:
            if not flags.enabled(stage.value):
                continue
            self.echo(f"=== {heading} ===")
            result = runner_cls(self.ctx, self.recorder, self.settings, runner=self.runner, echo=self.echo).run()
            stage_results[stage] = result
            outcomes[stage.value] = result.outcome
            if result.failed:
                self.echo(f"{stage.title} failed (continuing...)")
            self.echo("")

        records = self.recorder.records()
        self.echo("=== Generating dashboard ===")
        dashboard = self._write_dashboard(records)
        self.echo("")

        summary = render_summary(records, flags, {k: v.value for k, v in outcomes.items()})
        if self.step_summary is not None:
            append_summary(self.step_summary, summary)
        report = write_run_report(
            self.ctx.reports_dir / "report.json", build_run_report(self.ctx.run_id, records, summary)
        )

        self.echo("=== Results ===")
        self.echo("")
        self.echo(render_results_table(records))
        self.echo(render_closing(summary.failures, [stage.value for stage in summary.unreported]).rstrip("\n"))
        log_event(
            self.ctx,
            "info" if summary.ok else "warn",
            "pipeline",
            "done",
            verdict=summary.verdict.value,
            failures=summary.failures,
        )
        return PipelineResult(
            records=records,
            summary=summary,
            outcomes=outcomes,
            stage_results=stage_results,
            dashboard=dashboard,
            report=report,
        )

    def _write_dashboard(self, records: list[StatusRecord]) -> Path | None:
        out = self.ctx.reports_dir / "dashboard.html"
        try:
            write_dashboard(out, records, base_dir=self.ctx.root)
        except OSError as exc:
            log_event(self.ctx, "error", "dashboard", "write-failed", path=str(out), error=str(exc))
            return None
        self.echo(f"Generated reports dashboard: {out}")
        return out
