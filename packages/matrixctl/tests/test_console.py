from __future__ import annotations

from matrixctl.reporting.console import render_closing, render_results_table
from matrixctl.status.model import StatusRecord


def test_results_table_columns() -> None:
    records = [
        StatusRecord(stage="lint", scope="spec", target="redocly", outcome="ok", log_path="a"),
        StatusRecord(stage="compile", scope="client", target="typescript-fetch", outcome="fail", log_path="b"),
    ]
    lines = render_results_table(records).splitlines()
    assert lines[0] == "STEP         SCOPE        TARGET               STATUS"
    assert lines[2] == "lint         spec         redocly              ok"
    assert lines[3] == "compile      client       typescript-fetch     fail"


def test_closing_messages() -> None:
    assert render_closing(0, []).startswith("All steps completed successfully!")
    assert render_closing(2, []).startswith("Failures: 2\n")
    assert "generate, compile" in render_closing(0, ["generate", "compile"])
