"""Status record types and the tab-separated line format they travel in."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..core.errors import StatusFormatError

FIELD_COUNT = 5
CONFIG_TARGET = "_config_"


class Stage(str, Enum):
    LINT = "lint"
    GENERATE = "generate"
    COMPILE = "compile"

    @property
    def title(self) -> str:
        return self.value.capitalize()


class Scope(str, Enum):
    SPEC = "spec"
    SERVER = "server"
    CLIENT = "client"
    MODE = "mode"


class Outcome(str, Enum):
    OK = "ok"
    FAIL = "fail"

    @classmethod
    def from_exit_code(cls, code: int) -> "Outcome":
        return cls.OK if code == 0 else cls.FAIL


STAGE_ORDER: tuple[Stage, ...] = (Stage.LINT, Stage.GENERATE, Stage.COMPILE)


def _parse_enum(enum_cls: type[Enum], raw: str, field_name: str, where: str) -> Enum:
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise StatusFormatError(f"{where}: unknown {field_name} `{raw}` (expected one of: {allowed})") from None


@dataclass(frozen=True)
class StatusRecord:
    stage: Stage
    scope: Scope
    target: str
    outcome: Outcome
    log_path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "stage", _parse_enum(Stage, self.stage, "stage", "status record"))
        object.__setattr__(self, "scope", _parse_enum(Scope, self.scope, "scope", "status record"))
        object.__setattr__(self, "outcome", _parse_enum(Outcome, self.outcome, "outcome", "status record"))
        object.__setattr__(self, "log_path", str(self.log_path))
        if not self.target:
            raise StatusFormatError("status record target must not be empty")
        for name in ("target", "log_path"):
            value = getattr(self, name)
            if "\t" in value or "\n" in value or "\r" in value:
                raise StatusFormatError(f"status record {name} must not contain tabs or newlines: {value!r}")

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.stage.value, self.scope.value, self.target)

    def to_line(self) -> str:
        return "\t".join((self.stage.value, self.scope.value, self.target, self.outcome.value, self.log_path)) + "\n"

    def to_payload(self) -> dict[str, str]:
        return {
            "stage": self.stage.value,
            "scope": self.scope.value,
            "target": self.target,
            "outcome": self.outcome.value,
            "log_path": self.log_path,
        }

    @classmethod
    def from_line(cls, line: str, *, source: str = "<status>", lineno: int = 0) -> "StatusRecord":
        where = f"{source}:{lineno}" if lineno else source
        fields = line.rstrip("\r\n").split("\t")
        if len(fields) != FIELD_COUNT:
            raise StatusFormatError(f"{where}: expected {FIELD_COUNT} tab-separated fields, got {len(fields)}")
        stage, scope, target, outcome, log_path = fields
        if not target:
            raise StatusFormatError(f"{where}: empty target")
        return cls(
            stage=_parse_enum(Stage, stage, "stage", where),
            scope=_parse_enum(Scope, scope, "scope", where),
            target=target,
            outcome=_parse_enum(Outcome, outcome, "outcome", where),
            log_path=log_path,
        )


def count_failures(records: list[StatusRecord]) -> int:
    return sum(1 for record in records if not record.ok)
