from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_CONFIG, ERR_VALIDATION


@dataclass
class ScriptError(Exception):
    message: str
    code: int
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class ConfigError(ScriptError):
    """Broken invocation: unknown target, missing config file or directory."""

    def __init__(self, message: str, code: int = ERR_CONFIG) -> None:
        super().__init__(message, code, kind="config_error")


class StatusFormatError(ScriptError):
    def __init__(self, message: str, code: int = ERR_VALIDATION) -> None:
        super().__init__(message, code, kind="status_format")
