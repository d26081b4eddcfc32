"""Self-contained HTML dashboard with the captured logs embedded."""

from __future__ import annotations

from html import escape
from pathlib import Path

from ..status.model import STAGE_ORDER, StatusRecord, count_failures

LOG_BYTE_LIMIT = 100_000
DASHBOARD_TITLE = "OpenAPI Tools Report"
FOOTER_LINK = "https://github.com/entur/gha-openapi-tools"

_STYLE = """\
    :root {
      --bg: #0d1117; --fg: #c9d1d9; --border: #30363d;
      --green: #238636; --red: #da3633; --yellow: #d29922;
      --link: #58a6ff; --code-bg: #161b22;
    }
    * { box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Helvetica, Arial, sans-serif;
           background: var(--bg); color: var(--fg); margin: 0; padding: 20px; line-height: 1.5; }
    h1, h2, h3 { margin-top: 0; font-weight: 600; }
    h1 { border-bottom: 1px solid var(--border); padding-bottom: 10px; }
    .summary { display: flex; gap: 20px; margin-bottom: 30px; flex-wrap: wrap; }
    .stat { background: var(--code-bg); border: 1px solid var(--border); border-radius: 6px;
            padding: 16px 24px; text-align: center; min-width: 120px; }
    .stat-value { font-size: 2em; font-weight: 600; }
    .stat-label { color: #8b949e; font-size: 0.9em; }
    .stat.pass .stat-value { color: var(--green); }
    .stat.fail .stat-value { color: var(--red); }
    .section { margin-bottom: 30px; }
    .result-table { width: 100%; border-collapse: collapse; background: var(--code-bg);
                    border: 1px solid var(--border); border-radius: 6px; overflow: hidden; }
    .result-table th, .result-table td { padding: 12px; text-align: left; border-bottom: 1px solid var(--border); }
    .result-table th { background: var(--bg); font-weight: 600; }
    .result-table tr:last-child td { border-bottom: none; }
    .badge { display: inline-block; padding: 2px 8px; border-radius: 12px; font-size: 0.85em; font-weight: 500; }
    .badge.ok { background: var(--green); color: #fff; }
    .badge.fail { background: var(--red); color: #fff; }
    details { background: var(--code-bg); border: 1px solid var(--border); border-radius: 6px; margin-top: 10px; }
    summary { padding: 12px; cursor: pointer; font-weight: 500; }
    summary:hover { background: var(--border); }
    pre { margin: 0; padding: 16px; overflow-x: auto; font-size: 0.85em;
          background: var(--bg); border-top: 1px solid var(--border); max-height: 500px; overflow-y: auto; }
    code { font-family: ui-monospace, SFMono-Regular, "SF Mono", Menlo, monospace; }
    a { color: var(--link); text-decoration: none; }
    a:hover { text-decoration: underline; }
    .empty { color: #8b949e; font-style: italic; }
"""


def read_log_excerpt(path: Path, limit: int = LOG_BYTE_LIMIT) -> str:
    """First `limit` bytes of a log, or a placeholder when it is missing or unreadable."""
    if not path.is_file():
        return f"Log file not found: {path}"
    try:
        with path.open("rb") as handle:
            data = handle.read(limit)
    except OSError:
        return "Could not read log"
    return data.decode("utf-8", errors="replace")


def _resolve(log_path: str, base_dir: Path | None) -> Path:
    path = Path(log_path)
    if path.is_absolute() or base_dir is None:
        return path
    return base_dir / path


def _stat(value: int, label: str, css: str = "") -> str:
    cls = f"stat {css}".strip()
    return (
        f'    <div class="{cls}">\n'
        f'      <div class="stat-value">{value}</div>\n'
        f'      <div class="stat-label">{label}</div>\n'
        "    </div>\n"
    )


def _row(record: StatusRecord, base_dir: Path | None, limit: int) -> str:
    log_file = _resolve(record.log_path, base_dir)
    name = log_file.name if log_file.is_file() else "log"
    content = escape(read_log_excerpt(log_file, limit))
    return (
        "        <tr>\n"
        f"          <td>{escape(record.scope.value)}</td>\n"
        f"          <td>{escape(record.target)}</td>\n"
        f'          <td><span class="badge {record.outcome.value}">{record.outcome.value}</span></td>\n'
        "          <td>\n"
        "            <details>\n"
        f"              <summary>{escape(name)}</summary>\n"
        f"              <pre><code>{content}</code></pre>\n"
        "            </details>\n"
        "          </td>\n"
        "        </tr>\n"
    )


def render_dashboard(
    records: list[StatusRecord],
    *,
    base_dir: Path | None = None,
    limit: int = LOG_BYTE_LIMIT,
    title: str = DASHBOARD_TITLE,
) -> str:
    failed = count_failures(records)
    parts = [
        "<!DOCTYPE html>\n",
        '<html lang="en">\n',
        "<head>\n",
        '  <meta charset="UTF-8">\n',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n',
        f"  <title>{escape(title)}</title>\n",
        "  <style>\n",
        _STYLE,
        "  </style>\n",
        "</head>\n",
        "<body>\n",
        f"  <h1>{escape(title)}</h1>\n",
        '  <div class="summary">\n',
        _stat(len(records), "Total"),
        _stat(len(records) - failed, "Passed", "pass"),
        _stat(failed, "Failed", "fail"),
        "  </div>\n",
    ]
    for stage in STAGE_ORDER:
        rows = [r for r in records if r.stage is stage]
        if not rows:
            continue
        parts.extend(
            [
                '  <div class="section">\n',
                f"    <h2>{stage.title}</h2>\n",
                '    <table class="result-table">\n',
                "      <thead>\n",
                "        <tr><th>Scope</th><th>Target</th><th>Status</th><th>Log</th></tr>\n",
                "      </thead>\n",
                "      <tbody>\n",
            ]
        )
        parts.extend(_row(record, base_dir, limit) for record in rows)
        parts.extend(["      </tbody>\n", "    </table>\n", "  </div>\n"])
    if not records:
        parts.append('  <p class="empty">No status recorded.</p>\n')
    parts.extend(
        [
            '  <footer style="margin-top: 40px; padding-top: 20px; border-top: 1px solid var(--border); '
            'color: #8b949e; font-size: 0.85em;">\n',
            f'    Generated by the reusable GHA workflow <a href="{FOOTER_LINK}">OpenAPI Tools</a> from Entur.\n',
            "  </footer>\n",
            "</body>\n",
            "</html>\n",
        ]
    )
    return "".join(parts)


def write_dashboard(out: Path, records: list[StatusRecord], *, base_dir: Path | None = None) -> Path:
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render_dashboard(records, base_dir=base_dir), encoding="utf-8")
    return out
