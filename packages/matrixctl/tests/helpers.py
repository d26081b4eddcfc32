from __future__ import annotations

import os
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

from matrixctl.core.process import CommandResult

SRC = Path(__file__).resolve().parents[1] / "src"


@dataclass
class FakeRunner:
    """Stands in for docker: exit codes keyed by an exact command element."""

    codes: dict[str, int] = field(default_factory=dict)
    output: str = "tool output <ok> & done\n"
    calls: list[list[str]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def run(self, cmd: list[str], cwd: Path) -> CommandResult:
        with self._lock:
            self.calls.append(list(cmd))
        code = next((value for token, value in self.codes.items() if token in cmd), 0)
        return CommandResult(code=code, stdout=self.output, stderr="", duration_ms=0)


def run_matrixctl(*args: str, cwd: Path, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    full_env = {k: v for k, v in os.environ.items() if not k.startswith("GITHUB_")}
    full_env["PYTHONPATH"] = str(SRC)
    full_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "matrixctl", "--quiet", *args],
        cwd=cwd,
        env=full_env,
        text=True,
        capture_output=True,
        check=False,
    )
