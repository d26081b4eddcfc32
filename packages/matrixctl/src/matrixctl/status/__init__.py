"""Append-only status log shared by the pipeline stages."""

from .model import CONFIG_TARGET, STAGE_ORDER, Outcome, Scope, Stage, StatusRecord, count_failures
from .recorder import StatusRecorder, read_status, read_status_lenient

__all__ = [
    "CONFIG_TARGET",
    "STAGE_ORDER",
    "Outcome",
    "Scope",
    "Stage",
    "StatusRecord",
    "StatusRecorder",
    "count_failures",
    "read_status",
    "read_status_lenient",
]
