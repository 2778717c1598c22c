# tests/conftest.py
"""
Global pytest fixtures & test wiring for mermaidcheck.

Design goals
------------
- Hermetic runs: the Mermaid CLI is replaced by a tiny Python script that obeys
  the same `-i <in> -o <out>` contract, so no Node/Chromium is needed.
- Fast dev loop: tests needing a real `mmdc` are marked slow (opt in with --runslow).
- Helpful utilities: input-file writer, checker command, CLI runner.

Fake checker behaviour (keyed on markers in the diagram source):
    BROKEN       -> parse error on stderr, exit 1
    STDOUT_ONLY  -> error text on stdout only, exit 1
    SILENT       -> no output, exit 2
    SLEEP        -> sleeps far longer than any test timeout
    otherwise    -> writes a tiny SVG to the -o path, exit 0
"""

from __future__ import annotations

import json
import logging
import os
import shlex
import sys
import textwrap
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Sequence

import pytest

from mermaidcheck.logging_utils import reset_loggers

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ.setdefault("PIP_DISABLE_PIP_VERSION_CHECK", "1")

FAKE_CHECKER = textwrap.dedent(
    """
    import os
    import sys
    import time

    args = sys.argv[1:]
    src_path = args[args.index("-i") + 1]
    out_path = args[args.index("-o") + 1]
    log_path = os.environ.get("FAKE_CHECKER_LOG")
    if log_path:
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(src_path + "\\n")

    with open(src_path, encoding="utf-8") as f:
        src = f.read()

    if "SLEEP" in src:
        time.sleep(30)
    if "SILENT" in src:
        sys.exit(2)
    if "STDOUT_ONLY" in src:
        print("Syntax error in text (reported on stdout)")
        sys.exit(1)
    if "BROKEN" in src:
        sys.stderr.write("Error: Parse error on line 2:\\n...A --> \\n-----^\\nExpecting 'SQE', got 'EOF'\\n")
        sys.exit(1)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write("<svg xmlns='http://www.w3.org/2000/svg'></svg>")
    """
)


# -----------------------------------------------------------------------------
# PyTest knobs: marks, options, and slow test handling
# -----------------------------------------------------------------------------

def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runslow",
        action="store_true",
        default=False,
        help="Run tests marked as slow (need a real Mermaid CLI).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: spawns real subprocesses")


def pytest_collection_modifyitems(config: pytest.Config, items: List[pytest.Item]) -> None:
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="need --runslow to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)

# -----------------------------------------------------------------------------
# Logging isolation: the CLI installs handlers on the `mermaidcheck` logger
# -----------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_loggers(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.delenv("MERMAID_CLI", raising=False)
    monkeypatch.delenv("MERMAIDCHECK_TIMEOUT", raising=False)
    reset_loggers()
    yield
    reset_loggers()
    logging.getLogger("mermaidcheck").setLevel(logging.NOTSET)
    logging.getLogger("mermaidcheck").propagate = True

# -----------------------------------------------------------------------------
# Checker & data fixtures
# -----------------------------------------------------------------------------

@pytest.fixture()
def fake_checker(tmp_path: Path) -> List[str]:
    """Command prefix for the fake Mermaid CLI."""
    script = tmp_path / "fake_mmdc.py"
    script.write_text(FAKE_CHECKER, encoding="utf-8")
    return [sys.executable, str(script)]


@pytest.fixture()
def fake_checker_str(fake_checker: List[str]) -> str:
    """Same command as a single shell-quoted string (CLI --checker / MERMAID_CLI)."""
    return " ".join(shlex.quote(part) for part in fake_checker)


@pytest.fixture()
def checker_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """File the fake checker appends each input path to."""
    path = tmp_path / "checker_calls.log"
    monkeypatch.setenv("FAKE_CHECKER_LOG", str(path))
    return path


@pytest.fixture()
def write_diagrams(tmp_path: Path) -> Callable[..., Path]:
    """Write a JSON input collection and return its path."""

    def _write(records: Sequence[Dict[str, Any]], name: str = "diagrams.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(list(records), indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def scratch_dir(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture()
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
