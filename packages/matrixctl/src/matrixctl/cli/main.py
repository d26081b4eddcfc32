from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .. import __version__
from ..config.settings import MODES, Settings, build_settings, load_settings_file
from ..core.context import RunContext
from ..core.env import getenv
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_INTERNAL
from ..core.logging import log_event
from ..pipeline import Pipeline
from .output import render_error
from .stages import configure_stage_parsers, run_stage_command


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="matrixctl", description="OpenAPI lint/generate/compile matrix runner")
    p.add_argument("--version", action="version", version=f"matrixctl {__version__}")
    p.add_argument("--run-id", help="run identifier for logs and reports")
    p.add_argument("--root", help="workspace root (default: $WORKSPACE or the current directory)")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--log-json", action="store_true", help="emit structured log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable debug log events")
    vg.add_argument("--quiet", action="store_true", help="only emit warnings and errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    run_p = sub.add_parser("run", help="run lint, generate and compile locally, then render reports")
    run_p.add_argument("spec", help="path to the OpenAPI spec")
    run_p.add_argument("--mode", choices=MODES, help="generator mode (default: server)")
    run_p.add_argument("--server-generators", help="comma-separated server generators (default: all)")
    run_p.add_argument("--client-generators", help="comma-separated client generators (default: all)")
    run_p.add_argument("--server-config-dir", help="path to server configs (default: generators/server)")
    run_p.add_argument("--client-config-dir", help="path to client configs (default: generators/client)")
    run_p.add_argument("--generator-image", help="OpenAPI Generator image")
    run_p.add_argument("--redocly-image", help="Redocly CLI image")
    run_p.add_argument("--redocly-config", help="path to a Redocly config file")
    run_p.add_argument("--skip-lint", action="store_true", help="skip linting step")
    run_p.add_argument("--skip-generate", action="store_true", help="skip generation step")
    run_p.add_argument("--skip-compile", action="store_true", help="skip compilation step")
    run_p.add_argument("--clean", action="store_true", help="remove generated/ and reports/ before running")
    run_p.add_argument("--jobs", type=int, help="compile targets concurrently")
    run_p.add_argument("--settings", help="YAML settings file providing defaults")

    configure_stage_parsers(sub)
    return p


def _run_settings(ns: argparse.Namespace) -> Settings:
    file_payload = load_settings_file(Path(ns.settings)) if ns.settings else {}
    stages = {}
    for stage in ("lint", "generate", "compile"):
        if getattr(ns, f"skip_{stage}"):
            stages[stage] = False
    cli = {
        "spec_path": ns.spec,
        "mode": ns.mode,
        "server_generators": ns.server_generators,
        "client_generators": ns.client_generators,
        "server_config_dir": ns.server_config_dir,
        "client_config_dir": ns.client_config_dir,
        "generator_image": ns.generator_image,
        "redocly_image": ns.redocly_image,
        "redocly_config": ns.redocly_config,
        "jobs": ns.jobs,
        "stages": stages,
    }
    return build_settings(cli=cli, env=os.environ, file_payload=file_payload)


def _run_local(ctx: RunContext, ns: argparse.Namespace) -> int:
    settings = _run_settings(ns)
    summary_path = getenv("GITHUB_STEP_SUMMARY")
    pipeline = Pipeline(
        ctx,
        settings,
        clean=ns.clean,
        step_summary=Path(summary_path) if summary_path else None,
    )
    return pipeline.run().exit_code


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    ns = p.parse_args(argv)
    fmt = ns.format or "text"
    try:
        ctx = RunContext.from_args(
            run_id=ns.run_id,
            root=ns.root,
            output_format=fmt,
            verbose=ns.verbose,
            quiet=ns.quiet,
            log_json=ns.log_json,
        )
        if ns.cmd == "run":
            ctx = ctx.with_reports(ctx.root / "reports")
        log_event(ctx, "debug", "cli", "start", cmd=ns.cmd, fmt=fmt)
        if ns.cmd == "run":
            return _run_local(ctx, ns)
        return run_stage_command(ctx, ns)
    except ScriptError as exc:
        print(render_error(as_json=fmt == "json", message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(render_error(as_json=fmt == "json", message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
