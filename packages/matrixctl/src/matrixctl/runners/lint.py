from __future__ import annotations

from ..config.settings import container_path
from ..status.model import Scope, Stage
from .base import StepRunner, WorkUnit

LINT_TARGET = "redocly"


class LintRunner(StepRunner):
    stage = Stage.LINT

    def plan(self) -> list[WorkUnit]:
        s = self.settings
        config_arg = ["--config", container_path(s.redocly_config)] if s.redocly_config else []
        tail = [
            "-w",
            container_path(s.matrix_path),
            s.redocly_image,
            "lint",
            container_path(s.spec_path),
            *config_arg,
        ]
        command = ("docker", "run", "--rm", "-v", f"{self.ctx.root}:/work", *tail)
        display = " ".join(["docker", "run", "--rm", "-v", "${WORKSPACE}:/work", *tail])
        return [
            WorkUnit(
                scope=Scope.SPEC,
                target=LINT_TARGET,
                command=command,
                log_path=self.stage_dir / f"{LINT_TARGET}.log",
                label="redocly lint",
                display=display,
            )
        ]
