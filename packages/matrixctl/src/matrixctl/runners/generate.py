from __future__ import annotations

import os
from pathlib import Path

from ..config.settings import container_path
from ..core.errors import ConfigError
from ..fs import relax_permissions
from ..status.model import CONFIG_TARGET, Scope, Stage
from .base import StepRunner, WorkUnit


def _user_arg() -> list[str]:
    if not hasattr(os, "getuid"):
        return []
    return ["--user", f"{os.getuid()}:{os.getgid()}"]


class GenerateRunner(StepRunner):
    stage = Stage.GENERATE

    def run_stage(self) -> None:
        s = self.settings
        if not s.mode_valid:
            raise self.fail_config(
                Scope.MODE,
                "invalid",
                f"Invalid mode: {s.mode} (expected server, client, or both)",
                self.stage_dir / "_errors.log",
            )
        for scope in s.scopes:
            try:
                self.execute(self.plan_scope(scope))
            except ConfigError as exc:
                self.result.config_errors.append(exc.message)
        relax_permissions(s.matrix_root(self.ctx.root) / "generated", self.ctx)

    def plan(self) -> list[WorkUnit]:
        """Units for every scope in mode order; unlike `run_stage`, the first config error aborts."""
        units: list[WorkUnit] = []
        for scope in self.settings.scopes:
            units.extend(self.plan_scope(scope))
        return units

    def discover_configs(self, scope: Scope, host_dir: Path) -> list[Path]:
        error_log = self.stage_dir / scope.value / "_errors.log"
        if not host_dir.is_dir():
            raise self.fail_config(scope, CONFIG_TARGET, f"Missing {scope.value} config dir: {host_dir}", error_log)
        requested = self.settings.generators_for(scope)
        if requested:
            configs = []
            for name in requested:
                config = host_dir / f"{name}.yaml"
                if not config.is_file():
                    raise self.fail_config(scope, name, f"Missing {scope.value} generator config: {config}", error_log)
                configs.append(config)
        else:
            configs = sorted(p for p in host_dir.glob("*.yaml") if p.is_file())
        if not configs:
            raise self.fail_config(
                scope, CONFIG_TARGET, f"No {scope.value} generator configs found under {host_dir}", error_log
            )
        return configs

    def plan_scope(self, scope: Scope) -> list[WorkUnit]:
        s = self.settings
        host_root, container_root = s.config_root(self.ctx.root)
        config_dir = s.config_dir_for(scope).strip("/")
        container_dir = f"{container_root}/{config_dir}"
        units = []
        for config in self.discover_configs(scope, host_root / config_dir):
            name = config.name[: -len(".yaml")]
            tail = [
                "-w",
                container_path(s.matrix_path),
                s.generator_image,
                "generate",
                "-i",
                container_path(s.spec_path),
                "-c",
                f"{container_dir}/{config.name}",
            ]
            units.append(
                WorkUnit(
                    scope=scope,
                    target=name,
                    command=("docker", "run", "--rm", *_user_arg(), "-v", f"{self.ctx.root}:/work", *tail),
                    log_path=self.stage_dir / scope.value / f"{name}.log",
                    label=f"generate {scope.value} {name}",
                    display=" ".join(["docker", "run", "--rm", *_user_arg(), "-v", "${WORKSPACE}:/work", *tail]),
                )
            )
        return units
