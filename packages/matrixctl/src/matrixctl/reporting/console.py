from __future__ import annotations

from ..status.model import StatusRecord

_ROW = "{:<12} {:<12} {:<20} {:<8}"


def render_results_table(records: list[StatusRecord]) -> str:
    lines = [
        _ROW.format("STEP", "SCOPE", "TARGET", "STATUS").rstrip(),
        _ROW.format("----", "-----", "------", "------").rstrip(),
    ]
    for record in records:
        lines.append(_ROW.format(record.stage.value, record.scope.value, record.target, record.outcome.value).rstrip())
    return "\n".join(lines) + "\n"


def render_closing(failures: int, unreported: list[str]) -> str:
    if failures:
        return (
            f"Failures: {failures}\n"
            "See reports/ for detailed logs\n"
            "Open reports/dashboard.html for visual summary\n"
        )
    if unreported:
        return f"Failures: stages enabled but never reported status: {', '.join(unreported)}\n"
    return (
        "All steps completed successfully!\n"
        "\n"
        "Outputs:\n"
        "  Generated code: generated/\n"
        "  Reports:        reports/\n"
        "  Dashboard:      reports/dashboard.html\n"
    )
