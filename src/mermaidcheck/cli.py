#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mermaidcheck CLI

Commands:
  validate   Render every diagram in a JSON collection with the Mermaid CLI and
             report which ones fail (invalid ones are written to a side-file)
  stages     Show the stage presets (initial -> fixed -> round2)
  checker    Show the resolved Mermaid CLI command

Exit codes:
  0 success, 1 setup error (missing/unparsable input, bad config, scratch dir),
  3 invalid diagrams found with --strict
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import __version__
from .checker import discover_checker
from .config import DEFAULT_STAGE, STAGES, HarnessConfig, resolve_config
from .errors import SetupError
from .harness import Harness
from .io_utils import load_artifacts, write_invalid_outcomes
from .logging_utils import JsonlLogger, console, err_console, init_logger, reset_loggers
from .models import Artifact, Outcome, RunReport
from .reporting import print_report

app = typer.Typer(help="Validate Mermaid diagram collections with the Mermaid CLI (mmdc).")

EXIT_SETUP = 1
EXIT_INVALID = 3


def _version() -> str:
    try:
        return _pkg_version("mermaidcheck")
    except PackageNotFoundError:
        return __version__


def _fail(msg: str) -> None:
    err_console().print(f"[bold red]ERROR:[/] {escape(msg)}")
    raise typer.Exit(code=EXIT_SETUP)


def _version_callback(value: Optional[bool]) -> None:
    if value:
        console().print(_version())
        raise typer.Exit()


@app.callback()
def _main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        help="Show package version and exit.",
        is_eager=True,
    ),
) -> None:
    pass


def _event_hook(events: JsonlLogger):
    def _hook(index: int, artifact: Artifact, outcome: Outcome) -> None:
        events.log({
            "event": "artifact_checked",
            "index": index,
            "id": artifact.id,
            "title": artifact.title,
            "valid": outcome.ok,
        })
    return _hook


def run_validation(cfg: HarnessConfig, events: Optional[JsonlLogger] = None) -> RunReport:
    """Load, validate, report and persist invalid outcomes for one configured run."""
    artifacts = load_artifacts(cfg.input_path)
    out = console()
    out.print(f"Validating {len(artifacts)} {escape(cfg.label)} using mmdc...\n", highlight=False)

    harness = Harness(
        scratch_dir=cfg.scratch_dir,
        timeout=cfg.timeout,
        checker=cfg.checker,
        puppeteer_config=cfg.puppeteer_config,
        mermaid_config=cfg.mermaid_config,
        progress_every=cfg.progress_every,
        on_outcome=_event_hook(events) if events else None,
    )
    if events:
        events.log({"event": "run_started", "input": str(cfg.input_path), "total": len(artifacts)})
    report = harness.run(artifacts)
    if events:
        events.log({"event": "run_finished", **report.summary()})

    print_report(report, label=cfg.label, limit=cfg.truncate, show_valid=cfg.show_valid, out=out)
    if write_invalid_outcomes(cfg.invalid_out, report.invalid):
        out.print(f"\nInvalid diagrams written to [bold]{escape(str(cfg.invalid_out))}[/]")
    return report


@app.command()
def validate(
    input_path: Optional[Path] = typer.Argument(None, help="JSON array of {id, title, source} records (default: stage preset)."),
    stage: str = typer.Option(DEFAULT_STAGE, "--stage", "-s", help=f"Stage preset: {', '.join(STAGES)}."),
    scratch_dir: Optional[Path] = typer.Option(None, help="Directory for per-diagram temp files."),
    invalid_out: Optional[Path] = typer.Option(None, help="Where to write the invalid diagrams (JSON)."),
    timeout: Optional[float] = typer.Option(None, help="Per-diagram checker timeout in seconds (default 10)."),
    checker: Optional[str] = typer.Option(None, help="Checker command, e.g. 'mmdc' or 'npx --yes @mermaid-js/mermaid-cli'."),
    truncate: Optional[int] = typer.Option(None, help="Max characters of each diagnostic shown in the report."),
    show_valid: Optional[bool] = typer.Option(None, "--show-valid/--hide-valid", help="List the diagrams that rendered."),
    puppeteer_config: Optional[Path] = typer.Option(None, help="Puppeteer config passed to the checker (-p)."),
    mermaid_config: Optional[Path] = typer.Option(None, help="Mermaid config passed to the checker (-c)."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/JSON file overriding the stage preset."),
    events: Optional[Path] = typer.Option(None, help="Append JSONL run events to this file."),
    log_file: Optional[Path] = typer.Option(None, help="Also write log records to this file."),
    log_level: str = typer.Option("INFO", help="DEBUG, INFO, WARNING or ERROR."),
    strict: bool = typer.Option(False, help="Exit with code 3 when any diagram is invalid."),
) -> None:
    """Validate every diagram in INPUT_PATH by rendering it with the checker."""
    reset_loggers()
    init_logger(log_file, level=log_level)

    overrides: Dict[str, Any] = {
        "input_path": input_path,
        "scratch_dir": scratch_dir,
        "invalid_out": invalid_out,
        "timeout": timeout,
        "checker": checker,
        "truncate": truncate,
        "show_valid": show_valid,
        "puppeteer_config": puppeteer_config,
        "mermaid_config": mermaid_config,
    }
    try:
        cfg = resolve_config(stage, config_file=config, overrides=overrides)
        report = run_validation(cfg, events=JsonlLogger(events) if events else None)
    except SetupError as e:
        _fail(str(e))
        return
    except OSError as e:
        # --events (JSONL) target; other output paths raise SetupError
        _fail(f"cannot write output: {e}")
        return

    if strict and report.invalid_count:
        raise typer.Exit(code=EXIT_INVALID)


@app.command()
def stages() -> None:
    """Show the stage presets and their default paths."""
    table = Table(title="Stage presets")
    table.add_column("Stage", style="bold cyan", no_wrap=True)
    table.add_column("Input")
    table.add_column("Scratch dir")
    table.add_column("Invalid out")
    table.add_column("Truncate", justify="right")
    for name, cfg in STAGES.items():
        table.add_row(name, str(cfg.input_path), str(cfg.scratch_dir), str(cfg.invalid_out), str(cfg.truncate))
    console().print(table)


@app.command("checker")
def show_checker(
    checker: Optional[str] = typer.Option(None, help="Explicit checker command to resolve."),
) -> None:
    """Print the Mermaid CLI command that validate would run."""
    console().print(" ".join(discover_checker(checker)), markup=False, highlight=False)


def _entry() -> None:
    app()


if __name__ == "__main__":
    _entry()
