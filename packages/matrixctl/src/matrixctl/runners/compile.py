from __future__ import annotations

from ..status.model import Scope, Stage
from .base import StepRunner, WorkUnit

# Must match the build services declared in the matrix docker-compose.yaml.
SUPPORTED_GENERATORS: dict[Scope, tuple[str, ...]] = {
    Scope.SERVER: (
        "aspnetcore",
        "go-server",
        "kotlin-spring",
        "python-fastapi",
        "spring",
        "typescript-nestjs",
    ),
    Scope.CLIENT: (
        "csharp",
        "go",
        "java",
        "kotlin",
        "python",
        "typescript-axios",
        "typescript-fetch",
        "typescript-node",
    ),
}


def service_name(scope: Scope, generator: str) -> str:
    return f"build-{generator}" if scope is Scope.SERVER else f"build-client-{generator}"


class CompileRunner(StepRunner):
    stage = Stage.COMPILE

    def plan(self) -> list[WorkUnit]:
        s = self.settings
        error_log = self.stage_dir / "_errors.log"
        if not s.mode_valid:
            raise self.fail_config(
                Scope.MODE, "invalid", f"Invalid mode for compile: {s.mode} (expected server, client, or both)", error_log
            )
        compose_file = f"{s.matrix_path}/{s.compose_file}"
        units = []
        for scope in s.scopes:
            requested = s.generators_for(scope)
            for generator in requested:
                if generator not in SUPPORTED_GENERATORS[scope]:
                    raise self.fail_config(
                        scope, generator, f"Unsupported {scope.value} generator for compile: {generator}", error_log
                    )
            for generator in requested or SUPPORTED_GENERATORS[scope]:
                service = service_name(scope, generator)
                command = (
                    "docker",
                    "compose",
                    "-f",
                    compose_file,
                    "--project-directory",
                    s.matrix_path,
                    "run",
                    "--rm",
                    service,
                )
                units.append(
                    WorkUnit(
                        scope=scope,
                        target=generator,
                        command=command,
                        log_path=self.stage_dir / scope.value / f"{service}.log",
                        label=f"compile {service}",
                    )
                )
        return units
