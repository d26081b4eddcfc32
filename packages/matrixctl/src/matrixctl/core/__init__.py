"""matrixctl core package."""
from .context import RunContext
from .errors import ConfigError, ScriptError, StatusFormatError
from .logging import log_event
from .process import CommandResult, CommandRunner, SubprocessRunner, run_command

__all__ = [
    "RunContext",
    "ConfigError",
    "ScriptError",
    "StatusFormatError",
    "log_event",
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "run_command",
]
