"""Centralized environment variable helpers."""

from __future__ import annotations

import os

from .errors import ConfigError


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def require_env(name: str) -> str:
    value = os.environ.get(name, "")
    if not value:
        raise ConfigError(f"{name} is required")
    return value
