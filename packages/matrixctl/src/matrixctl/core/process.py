from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .logging import log_event

if TYPE_CHECKING:
    from .context import RunContext

ERR_TIMEOUT_CODE = 124
ERR_LAUNCH_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    code: int
    stdout: str
    stderr: str
    duration_ms: int

    @property
    def ok(self) -> bool:
        return self.code == 0

    @property
    def combined_output(self) -> str:
        return self.stdout + self.stderr


@runtime_checkable
class CommandRunner(Protocol):
    def run(self, cmd: list[str], cwd: Path) -> CommandResult: ...


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _run_once(cmd: list[str], cwd: Path, timeout_seconds: int) -> CommandResult:
    started = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            text=True,
            errors="replace",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
            timeout=timeout_seconds or None,
        )
    except subprocess.TimeoutExpired as exc:
        partial = exc.stdout.decode("utf-8", "replace") if isinstance(exc.stdout, bytes) else (exc.stdout or "")
        note = f"\ncommand timed out after {timeout_seconds}s\n"
        return CommandResult(ERR_TIMEOUT_CODE, partial, note, _elapsed_ms(started))
    except OSError as exc:
        return CommandResult(ERR_LAUNCH_CODE, "", f"failed to launch {cmd[0]}: {exc}\n", _elapsed_ms(started))
    return CommandResult(proc.returncode, proc.stdout or "", "", _elapsed_ms(started))


def run_command(
    cmd: list[str],
    cwd: Path,
    timeout_seconds: int = 0,
    retries: int = 0,
    retry_delay_seconds: float = 0.0,
    ctx: RunContext | None = None,
) -> CommandResult:
    """Run `cmd` with stderr folded into stdout, the way `2>&1 | tee` captures it."""
    result = CommandResult(1, "", "not run", 0)
    for attempt in range(1, retries + 2):
        result = _run_once(cmd, cwd, timeout_seconds)
        if ctx is not None:
            log_event(
                ctx,
                "info",
                "process",
                "run-command",
                command=" ".join(cmd),
                cwd=str(cwd),
                attempt=attempt,
                code=result.code,
                duration_ms=result.duration_ms,
            )
        if result.ok:
            break
        if attempt <= retries and retry_delay_seconds > 0:
            time.sleep(retry_delay_seconds)
    return result


@dataclass(frozen=True)
class SubprocessRunner:
    ctx: RunContext | None = None
    timeout_seconds: int = 0

    def run(self, cmd: list[str], cwd: Path) -> CommandResult:
        return run_command(cmd, cwd, timeout_seconds=self.timeout_seconds, ctx=self.ctx)
