"""Exception types raised at the harness boundary."""

from __future__ import annotations


class MermaidCheckError(Exception):
    """Base class for all mermaidcheck errors."""


class SetupError(MermaidCheckError):
    """
    Fatal error raised before any validation work starts: the input collection
    cannot be loaded, the configuration is invalid, or the scratch directory
    cannot be created.
    """
