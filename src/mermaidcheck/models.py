# src/mermaidcheck/models.py
# ==============================================================================
# Value types flowing through a validation run: input artifacts, per-artifact
# outcomes and the aggregate run report.
# ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union


@dataclass(frozen=True)
class Artifact:
    """One named unit of Mermaid source submitted for validation."""
    id: str
    title: str
    source: str


@dataclass(frozen=True)
class ValidOutcome:
    id: str
    title: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class InvalidOutcome:
    id: str
    title: str
    diagnostic: str
    source: str

    @property
    def ok(self) -> bool:
        return False

    def to_record(self) -> Dict[str, Any]:
        """Side-file record; `diagnostic` is written under the `error` key."""
        return {
            "id": self.id,
            "title": self.title,
            "error": self.diagnostic,
            "source": self.source,
        }


Outcome = Union[ValidOutcome, InvalidOutcome]


def success_rate(valid: int, total: int) -> int:
    """Integer percentage rounded half-up; an empty run counts as 0%."""
    if total <= 0:
        return 0
    return (200 * valid + total) // (2 * total)


@dataclass(frozen=True)
class RunReport:
    """Ordered outcomes of one run plus counts folded from them."""
    outcomes: Tuple[Outcome, ...] = field(default_factory=tuple)
    total: int = 0
    valid_count: int = 0
    invalid_count: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[Outcome]) -> "RunReport":
        ordered = tuple(outcomes)
        valid, invalid = 0, 0
        for o in ordered:
            if o.ok:
                valid += 1
            else:
                invalid += 1
        return cls(outcomes=ordered, total=len(ordered), valid_count=valid, invalid_count=invalid)

    @property
    def success_rate(self) -> int:
        return success_rate(self.valid_count, self.total)

    @property
    def valid(self) -> List[ValidOutcome]:
        return [o for o in self.outcomes if isinstance(o, ValidOutcome)]

    @property
    def invalid(self) -> List[InvalidOutcome]:
        return [o for o in self.outcomes if isinstance(o, InvalidOutcome)]

    def summary(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "valid": self.valid_count,
            "invalid": self.invalid_count,
            "success_rate": self.success_rate,
        }
