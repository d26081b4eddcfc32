from __future__ import annotations

import json
from pathlib import Path

import pytest
from helpers import run_matrixctl

from matrixctl.cli.main import build_parser, main
from matrixctl.core.exit_codes import ERR_CONFIG, ERR_FAILURES, ERR_UNREPORTED, ERR_VALIDATION, OK

STATUS = "lint\tspec\tredocly\tok\treports/lint/redocly.log\n"


def _ci_env(monkeypatch: pytest.MonkeyPatch, root: Path, **extra: str) -> Path:
    reports = root / "reports"
    reports.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("WORKSPACE", str(root))
    monkeypatch.setenv("REPORTS_DIR", str(reports))
    monkeypatch.setenv("STATUS_FILE", str(reports / "status.tsv"))
    for key, value in extra.items():
        monkeypatch.setenv(key, value)
    return reports


def test_parser_lists_ci_subcommands() -> None:
    help_text = build_parser().format_help()
    for cmd in ("run", "lint", "generate", "compile", "summarize", "dashboard", "report"):
        assert cmd in help_text


def test_summarize_ok_prints_when_no_step_summary(
    workspace: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    reports = _ci_env(monkeypatch, workspace, RUN_GENERATE="false", RUN_COMPILE="false")
    (reports / "status.tsv").write_text(STATUS, encoding="utf-8")
    assert main(["--quiet", "summarize"]) == OK
    assert "| redocly | ok | reports/lint/redocly.log |" in capsys.readouterr().out


def test_summarize_appends_to_step_summary(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    summary = workspace / "summary.md"
    reports = _ci_env(
        monkeypatch, workspace, RUN_GENERATE="false", RUN_COMPILE="false", GITHUB_STEP_SUMMARY=str(summary)
    )
    (reports / "status.tsv").write_text(STATUS.replace("\tok\t", "\tfail\t"), encoding="utf-8")
    assert main(["--quiet", "summarize"]) == ERR_FAILURES
    assert "Failures: 1" in summary.read_text(encoding="utf-8")


def test_summarize_unreported_stage_has_distinct_exit(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    reports = _ci_env(monkeypatch, workspace, RUN_COMPILE="false")
    (reports / "status.tsv").write_text(STATUS, encoding="utf-8")
    assert main(["--quiet", "summarize"]) == ERR_UNREPORTED


def test_summarize_without_status_file_fails(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _ci_env(monkeypatch, workspace)
    assert main(["--quiet", "summarize"]) == ERR_FAILURES


def test_missing_required_env_is_config_error(
    workspace: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _ci_env(monkeypatch, workspace)
    assert main(["--quiet", "lint"]) == ERR_CONFIG
    assert "SPEC_PATH is required" in capsys.readouterr().err


def test_json_error_envelope(workspace: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _ci_env(monkeypatch, workspace)
    assert main(["--quiet", "--format", "json", "generate"]) == ERR_CONFIG
    payload = json.loads(capsys.readouterr().err)
    assert payload["status"] == "error"
    assert payload["errors"][0]["kind"] == "config_error"


def test_dashboard_always_succeeds(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    reports = _ci_env(monkeypatch, workspace)
    (reports / "status.tsv").write_text(STATUS.replace("\tok\t", "\tfail\t"), encoding="utf-8")
    assert main(["--quiet", "dashboard"]) == OK
    assert '<span class="badge fail">fail</span>' in (reports / "dashboard.html").read_text(encoding="utf-8")


def test_dashboard_renders_valid_rows_of_malformed_status(
    workspace: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    reports = _ci_env(monkeypatch, workspace)
    (reports / "status.tsv").write_text(STATUS + "compile\tserver\tspring\tskipped\ty.log\n", encoding="utf-8")
    assert main(["--quiet", "dashboard"]) == OK
    html = (reports / "dashboard.html").read_text(encoding="utf-8")
    assert "<td>redocly</td>" in html
    assert "<td>spring</td>" not in html
    assert "action=status-invalid" in capsys.readouterr().err
    assert main(["--quiet", "summarize"]) == ERR_VALIDATION


def test_malformed_status_is_validation_error(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    reports = _ci_env(monkeypatch, workspace)
    (reports / "status.tsv").write_text("lint\tspec\tredocly\n", encoding="utf-8")
    assert main(["--quiet", "summarize"]) == ERR_VALIDATION


def test_report_write_then_validate(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    reports = _ci_env(monkeypatch, workspace, RUN_GENERATE="false", RUN_COMPILE="false")
    (reports / "status.tsv").write_text(STATUS, encoding="utf-8")
    assert main(["--quiet", "--run-id", "ci-7", "report", "write"]) == OK
    out = reports / "report.json"
    assert json.loads(out.read_text(encoding="utf-8"))["run_id"] == "ci-7"
    assert main(["--quiet", "report", "validate", str(out)]) == OK


def test_run_with_missing_spec_is_config_error(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(workspace)
    assert main(["--quiet", "--root", str(workspace), "run", "api/absent.yaml"]) == ERR_CONFIG


@pytest.mark.integration
def test_module_entrypoint_version(tmp_path: Path) -> None:
    proc = run_matrixctl("--version", cwd=tmp_path)
    assert proc.returncode == 0
    assert proc.stdout.startswith("matrixctl ")


@pytest.mark.integration
def test_module_entrypoint_summarize(workspace: Path) -> None:
    reports = workspace / "reports"
    reports.mkdir()
    (reports / "status.tsv").write_text(STATUS, encoding="utf-8")
    env = {"STATUS_FILE": str(reports / "status.tsv"), "RUN_GENERATE": "false", "RUN_COMPILE": "false"}
    proc = run_matrixctl("summarize", cwd=workspace, env=env)
    assert proc.returncode == 0, proc.stderr
    assert "## OpenAPI Tools Results" in proc.stdout


@pytest.mark.integration
def test_module_entrypoint_usage_error(tmp_path: Path) -> None:
    proc = run_matrixctl("run", "--mode", "sideways", "spec.yaml", cwd=tmp_path)
    assert proc.returncode == 2
