from .console import render_closing, render_results_table
from .dashboard import LOG_BYTE_LIMIT, read_log_excerpt, render_dashboard, write_dashboard
from .report import build_run_report, validate_run_report, write_run_report
from .summary import SummaryReport, Verdict, append_summary, render_summary, unreported_stages

__all__ = [
    "LOG_BYTE_LIMIT",
    "SummaryReport",
    "Verdict",
    "append_summary",
    "build_run_report",
    "read_log_excerpt",
    "render_closing",
    "render_dashboard",
    "render_results_table",
    "render_summary",
    "unreported_stages",
    "validate_run_report",
    "write_dashboard",
    "write_run_report",
]
