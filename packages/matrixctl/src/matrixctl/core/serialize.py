"""Canonical JSON serialization helpers."""

from __future__ import annotations

import json
from typing import Any


def dumps_json(payload: Any, pretty: bool = False) -> str:
    """Stable key order; log paths and tool output stay unescaped unicode."""
    return json.dumps(payload, indent=2 if pretty else None, sort_keys=True, ensure_ascii=False)
