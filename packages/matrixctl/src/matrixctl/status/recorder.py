from __future__ import annotations

import threading
from pathlib import Path

from ..core.context import RunContext
from ..core.errors import ScriptError, StatusFormatError
from ..core.exit_codes import ERR_ARTIFACT
from ..core.logging import log_event
from .model import Outcome, Scope, Stage, StatusRecord


class StatusRecorder:
    """Single writer for the run's append-only status file.

    Runners receive the recorder instead of the file path; the lock keeps each
    record a single intact line when units report from worker threads.
    """

    def __init__(self, path: Path, ctx: RunContext | None = None) -> None:
        self.path = path
        self.ctx = ctx
        self._lock = threading.Lock()
        self._seen: set[tuple[str, str, str]] = set()

    def reset(self) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text("", encoding="utf-8")
                self._seen.clear()
            except OSError as exc:
                raise ScriptError(f"cannot reset status file {self.path}: {exc}", ERR_ARTIFACT, kind="status_io") from exc

    def append(
        self,
        stage: Stage | str,
        scope: Scope | str,
        target: str,
        outcome: Outcome | str,
        log_path: Path | str,
    ) -> StatusRecord:
        record = StatusRecord(stage=stage, scope=scope, target=target, outcome=outcome, log_path=str(log_path))
        self.write(record)
        return record

    def write(self, record: StatusRecord) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(record.to_line())
            except OSError as exc:
                raise ScriptError(f"cannot append to status file {self.path}: {exc}", ERR_ARTIFACT, kind="status_io") from exc
            duplicate = record.key in self._seen
            self._seen.add(record.key)
        if duplicate and self.ctx is not None:
            log_event(self.ctx, "warn", "status", "duplicate-record", key="/".join(record.key))
        if self.ctx is not None:
            log_event(
                self.ctx,
                "info",
                "status",
                "record",
                stage=record.stage.value,
                scope=record.scope.value,
                target=record.target,
                outcome=record.outcome.value,
            )

    def records(self) -> list[StatusRecord]:
        return read_status(self.path, missing_ok=True)


def read_status(path: Path, missing_ok: bool = False) -> list[StatusRecord]:
    if not path.exists():
        if missing_ok:
            return []
        raise ScriptError(f"status file not found: {path}", ERR_ARTIFACT, kind="status_missing")
    records: list[StatusRecord] = []
    with path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            records.append(StatusRecord.from_line(line, source=str(path), lineno=lineno))
    return records


def read_status_lenient(path: Path) -> tuple[list[StatusRecord], list[StatusFormatError]]:
    """Parse every well-formed line and collect the errors for the rest."""
    records: list[StatusRecord] = []
    errors: list[StatusFormatError] = []
    if not path.exists():
        return records, errors
    with path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                records.append(StatusRecord.from_line(line, source=str(path), lineno=lineno))
            except StatusFormatError as exc:
                errors.append(exc)
    return records, errors
