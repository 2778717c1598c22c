from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Sequence

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import SetupError
from .models import Artifact, InvalidOutcome


class _ArtifactRecord(BaseModel):
    # Extra keys are ignored; numeric ids are accepted as strings.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    title: str
    source: str


def load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def save_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # Lone surrogates can only sit inside JSON strings, where "\udXXX" is the valid escape.
    with path.open("w", encoding="utf-8", errors="backslashreplace") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)


def load_artifacts(path: Path) -> List[Artifact]:
    """Load the whole input collection; any problem is a SetupError."""
    if not path.is_file():
        raise SetupError(f"{path} not found")
    try:
        raw = load_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SetupError(f"cannot read {path}: {e}") from e
    if not isinstance(raw, list):
        raise SetupError(f"{path}: expected a JSON array of diagrams, got {type(raw).__name__}")

    artifacts: List[Artifact] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise SetupError(f"{path}: record {i} is not an object")
        try:
            rec = _ArtifactRecord(**item)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise SetupError(f"{path}: record {i} is invalid ({fields})") from e
        artifacts.append(Artifact(id=rec.id, title=rec.title, source=rec.source))
    return artifacts


def write_invalid_outcomes(path: Path, outcomes: Sequence[InvalidOutcome]) -> bool:
    """Write the invalid subset as an ordered JSON array; no-op when empty."""
    if not outcomes:
        return False
    try:
        save_json(path, [o.to_record() for o in outcomes])
    except OSError as e:
        raise SetupError(f"cannot write invalid diagrams to {path}: {e}") from e
    return True
