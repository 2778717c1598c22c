"""
mermaidcheck: batch Mermaid diagram validation via the Mermaid CLI

Takes an ordered collection of {id, title, source} diagrams, renders each one
with an external checker (mmdc by default), and partitions them into valid and
invalid outcomes with captured diagnostics.

Exposes:
    __version__ : str
        Package version identifier.
    __all__ : list[str]
        Public names for `from mermaidcheck import ...`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import MermaidCheckError, SetupError  # noqa: E402
from .harness import Harness, validate_artifacts  # noqa: E402
from .models import Artifact, InvalidOutcome, RunReport, ValidOutcome  # noqa: E402

__all__ = [
    "Artifact",
    "Harness",
    "InvalidOutcome",
    "MermaidCheckError",
    "RunReport",
    "SetupError",
    "ValidOutcome",
    "validate_artifacts",
]
