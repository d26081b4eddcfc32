"""Run configuration: CLI flags over environment over settings file over defaults."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from ..core.errors import ConfigError
from ..core.schema import load_yaml, validate_payload
from ..status.model import Scope

MODES = ("server", "client", "both")
DEFAULT_GENERATOR_IMAGE = "openapitools/openapi-generator-cli:v7.17.0"
DEFAULT_REDOCLY_IMAGE = "redocly/cli:1.25.5"
DEFAULT_SERVER_CONFIG_DIR = "generators/server"
DEFAULT_CLIENT_CONFIG_DIR = "generators/client"
REPORTS_ARTIFACT = "openapi-tools-reports"

_TRUE = {"1", "true", "yes", "on"}


def parse_generator_list(raw: str | list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    if raw is None:
        return ()
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    return tuple(item.strip() for item in items if item and item.strip())


def _as_bool(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in _TRUE


@dataclass(frozen=True)
class StageFlags:
    lint: bool = True
    generate: bool = True
    compile: bool = True
    upload: bool = True

    def enabled(self, stage: str) -> bool:
        return bool(getattr(self, stage))

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "StageFlags":
        def flag(name: str) -> bool:
            raw = env.get(name, "")
            return True if raw == "" else raw == "true"

        return cls(
            lint=flag("RUN_LINT"),
            generate=flag("RUN_GENERATE"),
            compile=flag("RUN_COMPILE"),
            upload=flag("RUN_UPLOAD"),
        )


@dataclass(frozen=True)
class Settings:
    spec_path: str = ""
    mode: str = "server"
    server_generators: tuple[str, ...] = ()
    client_generators: tuple[str, ...] = ()
    server_config_dir: str = DEFAULT_SERVER_CONFIG_DIR
    client_config_dir: str = DEFAULT_CLIENT_CONFIG_DIR
    use_caller_configs: bool = False
    generator_image: str = DEFAULT_GENERATOR_IMAGE
    redocly_image: str = DEFAULT_REDOCLY_IMAGE
    redocly_config: str = ""
    matrix_path: str = "."
    compose_file: str = "docker-compose.yaml"
    jobs: int = 1
    timeout_seconds: int = 0
    stages: StageFlags = field(default_factory=StageFlags)

    @property
    def mode_valid(self) -> bool:
        return self.mode in MODES

    @property
    def scopes(self) -> tuple[Scope, ...]:
        if self.mode == "server":
            return (Scope.SERVER,)
        if self.mode == "client":
            return (Scope.CLIENT,)
        if self.mode == "both":
            return (Scope.SERVER, Scope.CLIENT)
        return ()

    def generators_for(self, scope: Scope) -> tuple[str, ...]:
        return self.server_generators if scope is Scope.SERVER else self.client_generators

    def config_dir_for(self, scope: Scope) -> str:
        return self.server_config_dir if scope is Scope.SERVER else self.client_config_dir

    def matrix_root(self, workspace: Path) -> Path:
        return (workspace / self.matrix_path).resolve()

    def config_root(self, workspace: Path) -> tuple[Path, str]:
        """Host and container roots the generator configs are resolved against."""
        if self.use_caller_configs:
            return workspace / "caller", "/work/caller"
        return workspace / self.matrix_path, container_path(self.matrix_path)


def container_path(relative: str) -> str:
    rel = relative.strip("/")
    if rel in ("", "."):
        return "/work"
    return f"/work/{rel}"


_ENV_FIELDS: dict[str, str] = {
    "spec_path": "SPEC_PATH",
    "mode": "MODE",
    "server_generators": "SERVER_GENERATORS",
    "client_generators": "CLIENT_GENERATORS",
    "server_config_dir": "SERVER_CONFIG_DIR",
    "client_config_dir": "CLIENT_CONFIG_DIR",
    "use_caller_configs": "USE_CALLER_CONFIGS",
    "generator_image": "GENERATOR_IMAGE",
    "redocly_image": "REDOCLY_IMAGE",
    "redocly_config": "REDOCLY_CONFIG",
    "matrix_path": "MATRIX_PATH",
    "compose_file": "COMPOSE_FILE",
    "jobs": "MATRIX_JOBS",
    "timeout_seconds": "MATRIX_TIMEOUT_SECONDS",
}


def _coerce(name: str, raw: Any) -> Any:
    if name in ("server_generators", "client_generators"):
        return parse_generator_list(raw)
    if name == "use_caller_configs":
        return _as_bool(raw)
    if name in ("jobs", "timeout_seconds"):
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be an integer, got `{raw}`") from None
        if value < (1 if name == "jobs" else 0):
            raise ConfigError(f"{name} out of range: {value}")
        return value
    return str(raw)


def load_settings_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"settings file not found: {path}")
    payload = load_yaml(path) or {}
    validate_payload(payload, "settings.schema.json", source=str(path))
    return dict(payload)


def build_settings(
    cli: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    file_payload: Mapping[str, Any] | None = None,
) -> Settings:
    cli = cli or {}
    env = env or {}
    file_payload = file_payload or {}
    values: dict[str, Any] = {}
    for f in fields(Settings):
        if f.name == "stages":
            continue
        env_name = _ENV_FIELDS.get(f.name)
        for candidate in (cli.get(f.name), env.get(env_name) if env_name else None, file_payload.get(f.name)):
            if candidate is None or candidate == "":
                continue
            values[f.name] = _coerce(f.name, candidate)
            break
    stages = StageFlags(**{**dict(file_payload.get("stages") or {}), **dict(cli.get("stages") or {})})
    return Settings(**values, stages=stages)
