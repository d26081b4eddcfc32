from .base import StageOutcome, StageResult, StepRunner, WorkUnit
from .compile import SUPPORTED_GENERATORS, CompileRunner, service_name
from .generate import GenerateRunner
from .lint import LINT_TARGET, LintRunner

__all__ = [
    "LINT_TARGET",
    "SUPPORTED_GENERATORS",
    "CompileRunner",
    "GenerateRunner",
    "LintRunner",
    "StageOutcome",
    "StageResult",
    "StepRunner",
    "WorkUnit",
    "service_name",
]
