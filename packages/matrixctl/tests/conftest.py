from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import settings

from matrixctl.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

settings.register_profile("matrixctl", deadline=None, max_examples=60)
settings.load_profile("matrixctl")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def clean_ci_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GITHUB_ACTIONS",
        "GITHUB_STEP_SUMMARY",
        "WORKSPACE",
        "REPORTS_DIR",
        "STATUS_FILE",
        "MODE",
        "SERVER_GENERATORS",
        "CLIENT_GENERATORS",
        "RUN_LINT",
        "RUN_GENERATE",
        "RUN_COMPILE",
        "RUN_UPLOAD",
        "LINT_OUTCOME",
        "GENERATE_OUTCOME",
        "COMPILE_OUTCOME",
        "MATRIX_JOBS",
        "MATRIX_TIMEOUT_SECONDS",
        "RUN_ID",
        "SPEC_PATH",
        "MATRIX_PATH",
        "COMPOSE_FILE",
        "SERVER_CONFIG_DIR",
        "CLIENT_CONFIG_DIR",
        "USE_CALLER_CONFIGS",
        "GENERATOR_IMAGE",
        "REDOCLY_IMAGE",
        "REDOCLY_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    (root / "generators/server").mkdir(parents=True)
    (root / "generators/client").mkdir(parents=True)
    for name in ("spring", "go-server"):
        (root / "generators/server" / f"{name}.yaml").write_text(f"generatorName: {name}\n", encoding="utf-8")
    for name in ("typescript-fetch",):
        (root / "generators/client" / f"{name}.yaml").write_text(f"generatorName: {name}\n", encoding="utf-8")
    (root / "api").mkdir()
    (root / "api/openapi.yaml").write_text("openapi: 3.0.3\n", encoding="utf-8")
    return root


@pytest.fixture
def ctx(workspace: Path) -> RunContext:
    reports = workspace / "reports"
    return RunContext(
        run_id="pytest-run",
        root=workspace,
        reports_dir=reports,
        status_file=reports / "status.tsv",
        quiet=True,
    )
