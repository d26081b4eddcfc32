from __future__ import annotations

import shlex
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from ..config.settings import Settings
from ..core.context import RunContext
from ..core.errors import ConfigError, ScriptError
from ..core.exit_codes import ERR_ARTIFACT
from ..core.logging import log_event
from ..core.process import CommandRunner, SubprocessRunner
from ..status.model import Outcome, Scope, Stage, StatusRecord
from ..status.recorder import StatusRecorder

Echo = Callable[[str], None]


class StageOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WorkUnit:
    scope: Scope
    target: str
    command: tuple[str, ...]
    log_path: Path
    label: str
    display: str = ""

    @property
    def header(self) -> str:
        return f"$ {self.display or shlex.join(self.command)}\n\n"


@dataclass
class StageResult:
    stage: Stage
    records: list[StatusRecord] = field(default_factory=list)
    config_errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.config_errors) or any(not record.ok for record in self.records)

    @property
    def outcome(self) -> StageOutcome:
        return StageOutcome.FAILURE if self.failed else StageOutcome.SUCCESS


class StepRunner:
    """Runs one external command per work unit and records one status line per unit.

    Configuration errors record a single failure and abort through `ConfigError`;
    a failing command only marks its own unit and the remaining units still run.
    """

    stage: Stage

    def __init__(
        self,
        ctx: RunContext,
        recorder: StatusRecorder,
        settings: Settings,
        runner: CommandRunner | None = None,
        echo: Echo = print,
    ) -> None:
        self.ctx = ctx
        self.recorder = recorder
        self.settings = settings
        self.runner = runner or SubprocessRunner(ctx, timeout_seconds=settings.timeout_seconds)
        self.echo = echo
        self.result = StageResult(self.stage)
        self._echo_lock = threading.Lock()

    @property
    def stage_dir(self) -> Path:
        return self.ctx.reports_dir / self.stage.value

    def plan(self) -> list[WorkUnit]:
        """Work units for the whole stage; every concrete runner overrides this."""
        raise NotImplementedError

    def run_stage(self) -> None:
        self.execute(self.plan())

    def run(self) -> StageResult:
        self.result = StageResult(self.stage)
        log_event(self.ctx, "info", self.stage.value, "start")
        try:
            self.run_stage()
        except ConfigError as exc:
            self.result.config_errors.append(exc.message)
        log_event(
            self.ctx,
            "info" if not self.result.failed else "warn",
            self.stage.value,
            "done",
            outcome=self.result.outcome.value,
            units=len(self.result.records),
        )
        return self.result

    def fail_config(self, scope: Scope, target: str, message: str, error_log: Path) -> ConfigError:
        try:
            error_log.parent.mkdir(parents=True, exist_ok=True)
            with error_log.open("a", encoding="utf-8") as handle:
                handle.write(message + "\n")
        except OSError as exc:
            raise ScriptError(f"cannot write {error_log}: {exc}", ERR_ARTIFACT, kind="log_io") from exc
        self._say(message)
        record = self.recorder.append(self.stage, scope, target, Outcome.FAIL, error_log)
        self.result.records.append(record)
        log_event(self.ctx, "error", self.stage.value, "config-error", scope=scope.value, target=target, message=message)
        return ConfigError(message)

    def execute(self, units: list[WorkUnit]) -> list[StatusRecord]:
        jobs = max(1, self.settings.jobs)
        if jobs > 1 and len(units) > 1:
            with ThreadPoolExecutor(max_workers=jobs) as ex:
                records = list(ex.map(self.run_unit, units))
        else:
            records = [self.run_unit(unit) for unit in units]
        self.result.records.extend(records)
        return records

    def run_unit(self, unit: WorkUnit) -> StatusRecord:
        result = self.runner.run(list(unit.command), self.ctx.root)
        try:
            unit.log_path.parent.mkdir(parents=True, exist_ok=True)
            unit.log_path.write_text(unit.header + result.combined_output, encoding="utf-8")
        except OSError as exc:
            raise ScriptError(f"cannot write {unit.log_path}: {exc}", ERR_ARTIFACT, kind="log_io") from exc
        self._show(unit, result.combined_output)
        outcome = Outcome.from_exit_code(result.code)
        if outcome is Outcome.FAIL:
            log_event(self.ctx, "warn", self.stage.value, "unit-failed", target=unit.target, code=result.code, log=str(unit.log_path))
        return self.recorder.append(self.stage, unit.scope, unit.target, outcome, unit.log_path)

    def _show(self, unit: WorkUnit, output: str) -> None:
        if self.ctx.quiet:
            return
        lines = []
        if self.ctx.in_github_actions:
            lines.append(f"::group::{unit.label}")
        if output:
            lines.append(output.rstrip("\n"))
        if self.ctx.in_github_actions:
            lines.append("::endgroup::")
        if lines:
            self._say("\n".join(lines))

    def _say(self, text: str) -> None:
        with self._echo_lock:
            self.echo(text)
