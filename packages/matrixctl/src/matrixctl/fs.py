from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path

from .core.context import RunContext
from .core.logging import log_event

_RW_ALL = stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IWGRP | stat.S_IROTH | stat.S_IWOTH


def relax_permissions(root: Path, ctx: RunContext | None = None) -> int:
    """Best-effort `chmod -R a+rw` for trees written by containers running as root."""
    if not root.is_dir():
        return 0
    changed = 0
    for path in [root, *root.rglob("*")]:
        try:
            mode = path.lstat().st_mode
            if stat.S_ISLNK(mode):
                continue
            os.chmod(path, mode | _RW_ALL)
            changed += 1
        except OSError as exc:
            if ctx is not None:
                log_event(ctx, "debug", "fs", "chmod-skipped", path=str(path), error=str(exc))
    return changed


def clean_outputs(ctx: RunContext, *paths: Path) -> list[str]:
    removed: list[str] = []
    for path in paths:
        if not path.exists():
            continue
        shutil.rmtree(path)
        removed.append(str(path))
        log_event(ctx, "info", "fs", "removed", path=str(path))
    return removed


def prepare_reports_tree(reports_dir: Path) -> None:
    for rel in ("lint", "generate/server", "generate/client", "compile"):
        (reports_dir / rel).mkdir(parents=True, exist_ok=True)
