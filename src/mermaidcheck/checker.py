#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mermaidcheck.checker: Mermaid CLI (mmdc) discovery and invocation

The checker is any executable honouring the mmdc contract:

    <checker> -i <input.mmd> -o <output.svg> [-p puppeteer.json] [-c mermaidrc.json]

exiting 0 when the diagram renders and non-zero otherwise, with diagnostics on
stderr (sometimes stdout). Nothing here interprets diagram syntax.

Resolution priority for the command prefix:
  1) explicit command passed by the caller (CLI --checker / config file)
  2) MERMAID_CLI env (split shell-style; may be e.g. 'npx --yes @mermaid-js/mermaid-cli')
  3) 'mmdc' discoverable on PATH
  4) fallback: 'npx --yes @mermaid-js/mermaid-cli'
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

NPX_FALLBACK = ["npx", "--yes", "@mermaid-js/mermaid-cli"]
GENERIC_FAILURE = "checker failed without producing any output"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one checker invocation. Never raised, always returned."""
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    launch_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and self.launch_error is None

    def diagnostic(self, timeout: Optional[float] = None) -> str:
        """
        Failure text in preference order: stderr, stdout, then a generic message.
        Timeouts and launch failures are always named in the returned text.
        """
        text = self.stderr.strip() or self.stdout.strip()
        if self.timed_out:
            limit = f" after {timeout:g}s" if timeout is not None else ""
            head = f"checker timed out{limit}"
            return f"{head}\n{text}" if text else head
        if self.launch_error is not None:
            return f"checker could not be launched: {self.launch_error}"
        return text or f"{GENERIC_FAILURE} (exit code {self.returncode})"


def split_command(cmd: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(cmd, str):
        return shlex.split(cmd)
    return [str(c) for c in cmd]


def discover_checker(explicit: Union[str, Sequence[str], None] = None) -> List[str]:
    """Resolve the checker command prefix (see module docstring for priority)."""
    if explicit:
        return split_command(explicit)
    env_cmd = os.environ.get("MERMAID_CLI", "").strip()
    if env_cmd:
        return split_command(env_cmd)
    mmdc = shutil.which("mmdc")
    if mmdc:
        return [mmdc]
    return list(NPX_FALLBACK)


def build_command(
    prefix: Sequence[str],
    in_file: Path,
    out_file: Path,
    puppeteer_cfg: Optional[Path] = None,
    mermaidrc: Optional[Path] = None,
) -> List[str]:
    args = list(prefix) + ["-i", str(in_file), "-o", str(out_file)]
    if puppeteer_cfg and puppeteer_cfg.exists():
        args += ["-p", str(puppeteer_cfg)]
    if mermaidrc and mermaidrc.exists():
        args += ["-c", str(mermaidrc)]
    return args


def _as_text(data: Union[bytes, str, None]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def run_checker(cmd: Sequence[str], timeout: float, cwd: Optional[Path] = None) -> CheckResult:
    """
    Run one checker process with stdout/stderr captured and a hard wall-clock
    timeout. subprocess.run kills the child when the timeout expires.
    """
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return CheckResult(returncode=None, stdout=_as_text(e.stdout), stderr=_as_text(e.stderr), timed_out=True)
    except (OSError, ValueError) as e:
        return CheckResult(returncode=None, launch_error=str(e))
    return CheckResult(returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")
