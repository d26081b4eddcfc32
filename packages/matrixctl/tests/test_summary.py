from __future__ import annotations

from pathlib import Path

from matrixctl.config.settings import StageFlags
from matrixctl.core.exit_codes import ERR_FAILURES, ERR_UNREPORTED, OK
from matrixctl.reporting.summary import Verdict, append_summary, render_summary, unreported_stages
from matrixctl.status.model import Stage, StatusRecord


def _rec(stage: str, scope: str, target: str, outcome: str, log: str = "reports/x.log") -> StatusRecord:
    return StatusRecord(stage=stage, scope=scope, target=target, outcome=outcome, log_path=log)


ONLY_LINT = StageFlags(lint=True, generate=False, compile=False, upload=False)


def test_lint_only_run_passes_and_marks_other_stages_skipped() -> None:
    records = [_rec("lint", "spec", "redocly", "ok", "reports/lint/redocly.log")]
    report = render_summary(records, ONLY_LINT)

    assert report.verdict is Verdict.OK
    assert report.exit_code == OK
    assert "### Lint\n\n| Tool | Status | Log |\n|---|---|---|\n| redocly | ok | reports/lint/redocly.log |" in report.text
    assert "Skipped (run_generate=false)" in report.text
    assert "Skipped (run_compile=false)" in report.text
    assert "Skipped (run_lint=false)" not in report.text
    assert "Reports artifact: skipped (run_upload=false)" in report.text
    assert "Failures" not in report.text


def test_recorded_failure_counts_and_sets_exit_code() -> None:
    records = [
        _rec("generate", "server", "spring", "ok"),
        _rec("generate", "server", "go-server", "fail"),
    ]
    flags = StageFlags(lint=False, generate=True, compile=False)
    report = render_summary(records, flags)

    assert report.verdict is Verdict.RECORDED_FAILURES
    assert report.failures == 1
    assert report.exit_code == ERR_FAILURES
    assert "### Generate (server)\n\n| Generator | Status | Log |" in report.text
    assert "| go-server | fail | reports/x.log |" in report.text
    assert report.text.rstrip().endswith("Failures: 1")


def test_tables_follow_stage_then_scope_order() -> None:
    records = [
        _rec("compile", "server", "spring", "ok"),
        _rec("generate", "client", "go", "ok"),
        _rec("generate", "server", "spring", "ok"),
        _rec("lint", "spec", "redocly", "ok"),
    ]
    text = render_summary(records, StageFlags()).text
    positions = [text.index(h) for h in ("### Lint", "### Generate (server)", "### Generate (client)", "### Compile (server)")]
    assert positions == sorted(positions)
    assert "| Target | Status | Log |" in text
    assert "Reports artifact: `openapi-tools-reports`" in text


def test_enabled_stage_without_records_is_unreported() -> None:
    records = [_rec("lint", "spec", "redocly", "ok")]
    flags = StageFlags(lint=True, generate=True, compile=False)
    report = render_summary(records, flags)

    assert report.verdict is Verdict.UNREPORTED_STAGE
    assert report.exit_code == ERR_UNREPORTED
    assert report.exit_code != ERR_FAILURES
    assert report.unreported == (Stage.GENERATE,)
    assert "Failures: at least one step failed before reporting status." in report.text
    assert "Stages without status: generate" in report.text


def test_disabled_stage_without_records_is_not_a_failure() -> None:
    assert unreported_stages([], StageFlags(lint=False, generate=False, compile=False)) == ()


def test_failed_step_without_failing_record_is_unreported() -> None:
    records = [_rec("lint", "spec", "redocly", "ok")]
    flags = StageFlags(lint=True, generate=False, compile=False)
    assert unreported_stages(records, flags, {"lint": "failure"}) == (Stage.LINT,)
    assert unreported_stages(records, flags, {"lint": "success"}) == ()


def test_recorded_failures_take_precedence_over_unreported() -> None:
    records = [_rec("lint", "spec", "redocly", "fail")]
    report = render_summary(records, StageFlags(lint=True, generate=True, compile=False))
    assert report.verdict is Verdict.RECORDED_FAILURES
    assert report.exit_code == ERR_FAILURES
    assert "Stages without status: generate" in report.text


def test_missing_status_file_is_a_failure() -> None:
    report = render_summary(None, StageFlags())
    assert report.verdict is Verdict.MISSING_STATUS
    assert report.exit_code == ERR_FAILURES
    assert "No status file found." in report.text
    assert report.failures == 1
    assert report.text.rstrip().endswith("Failures: 1")


def test_pipe_in_cells_is_escaped() -> None:
    records = [_rec("lint", "spec", "redocly", "ok", "reports/a|b.log")]
    assert "reports/a\\|b.log" in render_summary(records, ONLY_LINT).text


def test_render_is_idempotent() -> None:
    records = [_rec("lint", "spec", "redocly", "ok"), _rec("generate", "server", "spring", "fail")]
    assert render_summary(records, StageFlags()).text == render_summary(records, StageFlags()).text


def test_append_summary_appends(tmp_path: Path) -> None:
    out = tmp_path / "step_summary.md"
    out.write_text("previous\n", encoding="utf-8")
    report = render_summary([_rec("lint", "spec", "redocly", "ok")], ONLY_LINT)
    append_summary(out, report)
    assert out.read_text(encoding="utf-8") == "previous\n" + report.text


def test_compile_failure_example() -> None:
    records = [
        _rec("compile", "server", "go-server", "fail", "reports/compile/server/build-go-server.log"),
        _rec("compile", "server", "spring", "ok", "reports/compile/server/build-spring.log"),
    ]
    report = render_summary(records, StageFlags(lint=False, generate=False, compile=True))
    assert report.failures == 1
    assert report.exit_code != OK
    assert "### Compile (server)\n\n| Target | Status | Log |" in report.text


def test_mode_records_get_their_own_table() -> None:
    records = [_rec("generate", "mode", "invalid", "fail", "reports/generate/_errors.log")]
    text = render_summary(records, StageFlags(lint=False, compile=False)).text
    assert "### Generate (mode)" in text
    assert "| invalid | fail | reports/generate/_errors.log |" in text
