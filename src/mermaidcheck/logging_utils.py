#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mermaidcheck.logging_utils: console + logger + JSONL event helpers

Goals
-----
• One-liner initialization that works locally and on CI:
    logger = init_logger("logs/mermaidcheck.log", level="INFO", rich=True)
• Rich (color) console on a TTY, plain `time | level | name | message` otherwise.
• Optional plain file handler and an append-only JSONL event stream.
• Handler cache so repeated init calls never duplicate output.

Typical use
-----------
    from mermaidcheck.logging_utils import init_logger, get_logger, JsonlLogger
    init_logger(level="DEBUG")
    log = get_logger("mermaidcheck.harness")
    events = JsonlLogger("logs/events.jsonl")
    events.log({"event": "run_started", "total": 12})
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_CACHE: Dict[str, logging.Logger] = {}
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)


def console() -> Console:
    return _CONSOLE


def err_console() -> Console:
    return _ERR_CONSOLE


def _ensure_dir(path: Union[str, Path]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def _is_tty(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty()) if callable(isatty) else False


def _fmt_plain() -> logging.Formatter:
    # timestamp | level | name | message
    return logging.Formatter(fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S")


def _level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def init_logger(
    file_path: Optional[Union[str, Path]] = None,
    *,
    level: str = "INFO",
    rich: bool = True,
    name: str = "mermaidcheck",
    propagate: bool = False,
) -> logging.Logger:
    """
    Initialize a named logger with a Rich console handler (TTY only) or a plain
    stderr StreamHandler, plus an optional plain file handler. Calling it again
    for the same name updates the level and returns the cached logger.
    """
    if name in _LOGGER_CACHE:
        lg = _LOGGER_CACHE[name]
        lg.setLevel(_level(level))
        for h in lg.handlers:
            h.setLevel(_level(level))
        return lg

    logger = logging.getLogger(name)
    logger.setLevel(_level(level))
    logger.propagate = bool(propagate)

    if not logger.handlers:
        if rich and _is_tty(sys.stderr):
            ch: logging.Handler = RichHandler(
                console=_ERR_CONSOLE, show_time=False, show_level=True, show_path=False, markup=False
            )
        else:
            ch = logging.StreamHandler(sys.stderr)
            ch.setFormatter(_fmt_plain())
        ch.setLevel(_level(level))
        logger.addHandler(ch)

        if file_path:
            _ensure_dir(file_path)
            fh = logging.FileHandler(str(file_path), mode="a", encoding="utf-8")
            fh.setLevel(_level(level))
            fh.setFormatter(_fmt_plain())
            logger.addHandler(fh)

    _LOGGER_CACHE[name] = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger; propagates to the `mermaidcheck` logger set up by init_logger()."""
    return logging.getLogger(name)


def reset_loggers() -> None:
    """Drop cached handlers (used by tests and repeated CLI invocations)."""
    for lg in _LOGGER_CACHE.values():
        for h in list(lg.handlers):
            lg.removeHandler(h)
            h.close()
        lg.setLevel(logging.NOTSET)
        lg.propagate = True
    _LOGGER_CACHE.clear()


class JsonlLogger:
    """
    Minimal JSONL event logger. Always appends; creates parent dirs.
    """
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        _ensure_dir(self.path)

    def log(self, event: Mapping[str, Any]) -> None:
        payload = dict(event)
        payload.setdefault("ts", time.time())
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
