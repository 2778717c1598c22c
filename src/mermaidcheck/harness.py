#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mermaidcheck.harness: sequential batch validation

For each artifact, in input order:
  1) write its source to <scratch>/diagram_<i>.mmd
  2) run the checker with -i diagram_<i>.mmd -o diagram_<i>.svg (captured, timed out)
  3) exit 0 -> ValidOutcome; anything else -> InvalidOutcome with a diagnostic
  4) remove both scratch files, discarding removal errors

One outcome per artifact, in order. A failure for one artifact never stops the
batch; the only fatal condition here is an uncreatable scratch directory.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .checker import CheckResult, build_command, discover_checker, run_checker
from .errors import SetupError
from .logging_utils import get_logger
from .models import Artifact, InvalidOutcome, Outcome, RunReport, ValidOutcome

log = get_logger("mermaidcheck.harness")

Runner = Callable[[Sequence[str], float], CheckResult]
OutcomeHook = Callable[[int, Artifact, Outcome], None]


def scratch_paths(scratch_dir: Path, index: int) -> Tuple[Path, Path]:
    return scratch_dir / f"diagram_{index}.mmd", scratch_dir / f"diagram_{index}.svg"


def remove_quietly(path: Path) -> None:
    """Attempt removal; any error (already gone, permissions, ...) is discarded."""
    with suppress(OSError):
        path.unlink()


def remove_dir_quietly(path: Path) -> None:
    with suppress(OSError):
        path.rmdir()


def prepare_scratch_dir(scratch_dir: Path) -> Path:
    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SetupError(f"cannot create scratch directory {scratch_dir}: {e}") from e
    return scratch_dir


@dataclass
class Harness:
    """
    Validate artifacts one at a time against an external checker.

    `runner` is the subprocess seam (defaults to checker.run_checker); tests
    swap it out to avoid spawning processes.
    """
    scratch_dir: Path
    timeout: float = 10.0
    checker: Optional[Sequence[str]] = None
    puppeteer_config: Optional[Path] = None
    mermaid_config: Optional[Path] = None
    progress_every: int = 20
    runner: Runner = run_checker
    on_outcome: Optional[OutcomeHook] = None

    def __post_init__(self) -> None:
        self.checker = discover_checker(self.checker)

    def check_one(self, index: int, artifact: Artifact) -> Outcome:
        in_file, out_file = scratch_paths(self.scratch_dir, index)
        try:
            try:
                in_file.write_text(artifact.source, encoding="utf-8")
            except (OSError, UnicodeError) as e:
                # UnicodeError: JSON admits lone surrogates ("\ud800") that UTF-8 cannot encode.
                return InvalidOutcome(
                    id=artifact.id,
                    title=artifact.title,
                    diagnostic=f"cannot write scratch file {in_file}: {e}",
                    source=artifact.source,
                )
            cmd = build_command(self.checker, in_file, out_file, self.puppeteer_config, self.mermaid_config)
            log.debug("checking %s (%s): %s", artifact.title, artifact.id, " ".join(cmd))
            result = self.runner(cmd, self.timeout)
        finally:
            remove_quietly(in_file)
            remove_quietly(out_file)

        if result.ok:
            return ValidOutcome(id=artifact.id, title=artifact.title)
        diagnostic = result.diagnostic(self.timeout)
        log.warning("invalid: %s (%s): %s", artifact.title, artifact.id, diagnostic.splitlines()[0])
        return InvalidOutcome(id=artifact.id, title=artifact.title, diagnostic=diagnostic, source=artifact.source)

    def run(self, artifacts: Sequence[Artifact]) -> RunReport:
        prepare_scratch_dir(self.scratch_dir)
        total = len(artifacts)
        outcomes: List[Outcome] = []
        for i, artifact in enumerate(artifacts):
            outcome = self.check_one(i, artifact)
            outcomes.append(outcome)
            if self.on_outcome is not None:
                self.on_outcome(i, artifact, outcome)
            if self.progress_every and (i + 1) % self.progress_every == 0:
                log.info("Processed %d/%d...", i + 1, total)
        # Leftovers from earlier interrupted runs may keep it non-empty.
        remove_dir_quietly(self.scratch_dir)
        return RunReport.from_outcomes(outcomes)


def validate_artifacts(
    artifacts: Sequence[Artifact],
    scratch_dir: Path,
    timeout: float = 10.0,
    checker: Optional[Sequence[str]] = None,
    **kwargs,
) -> RunReport:
    """Functional entry point: build a Harness and run it once."""
    return Harness(scratch_dir=Path(scratch_dir), timeout=timeout, checker=checker, **kwargs).run(artifacts)
