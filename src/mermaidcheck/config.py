# src/mermaidcheck/config.py
# ==============================================================================
# Run configuration. Layering, lowest to highest priority:
#   stage preset -> config file (--config) -> environment -> CLI overrides
# ==============================================================================

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .checker import split_command
from .errors import SetupError

DEFAULT_TIMEOUT = 10.0
DEFAULT_PROGRESS_EVERY = 20
DEFAULT_STAGE = "initial"


@dataclass(frozen=True)
class HarnessConfig:
    input_path: Path
    scratch_dir: Path
    invalid_out: Path
    label: str = "diagrams"
    timeout: float = DEFAULT_TIMEOUT
    truncate: int = 500
    show_valid: bool = False
    progress_every: int = DEFAULT_PROGRESS_EVERY
    checker: Optional[List[str]] = None
    puppeteer_config: Optional[Path] = None
    mermaid_config: Optional[Path] = None


# initial validation -> AI-assisted fix -> re-validation
STAGES: Dict[str, HarnessConfig] = {
    "initial": HarnessConfig(
        input_path=Path("diagrams_to_validate.json"),
        scratch_dir=Path("/tmp/mermaid_validate"),
        invalid_out=Path("/tmp/broken_diagrams.json"),
        label="diagrams",
        truncate=500,
        show_valid=False,
    ),
    "fixed": HarnessConfig(
        input_path=Path("/tmp/fixed_diagrams_for_validation.json"),
        scratch_dir=Path("/tmp/mermaid_validate_fixed"),
        invalid_out=Path("/tmp/still_broken_after_ai_fix.json"),
        label="fixed diagrams",
        truncate=300,
        show_valid=True,
    ),
    "round2": HarnessConfig(
        input_path=Path("/tmp/fixed_diagrams_round2.json"),
        scratch_dir=Path("/tmp/mermaid_validate_r2"),
        invalid_out=Path("/tmp/still_broken_round2.json"),
        label="round 2 fixed diagrams",
        truncate=200,
        show_valid=True,
    ),
}

_PATH_FIELDS = {"input_path", "scratch_dir", "invalid_out", "puppeteer_config", "mermaid_config"}
_FIELD_NAMES = {f.name for f in fields(HarnessConfig)}


def stage_preset(name: str) -> HarnessConfig:
    try:
        return STAGES[name]
    except KeyError:
        raise SetupError(f"unknown stage {name!r} (choose from: {', '.join(STAGES)})") from None


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML (.yaml/.yml) or JSON mapping of HarnessConfig fields."""
    if not path.is_file():
        raise SetupError(f"config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in {".yaml", ".yml"}:
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text or "{}")
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise SetupError(f"cannot parse config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise SetupError(f"config file {path} must contain a mapping")
    return raw


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    env = os.environ if environ is None else environ
    out: Dict[str, Any] = {}
    raw_timeout = env.get("MERMAIDCHECK_TIMEOUT", "").strip()
    if raw_timeout:
        try:
            out["timeout"] = float(raw_timeout)
        except ValueError:
            raise SetupError(f"MERMAIDCHECK_TIMEOUT is not a number: {raw_timeout!r}") from None
    return out


def _coerce(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key in _PATH_FIELDS:
        return Path(value)
    if key == "checker":
        return split_command(value)
    if key == "timeout":
        return float(value)
    if key in {"truncate", "progress_every"}:
        return int(value)
    if key == "show_valid":
        return _as_bool(value)
    return value


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def apply_overrides(base: HarnessConfig, overrides: Mapping[str, Any]) -> HarnessConfig:
    unknown = sorted(set(overrides) - _FIELD_NAMES)
    if unknown:
        raise SetupError(f"unknown config keys: {', '.join(unknown)}")
    try:
        values = {k: _coerce(k, v) for k, v in overrides.items() if v is not None}
    except (TypeError, ValueError) as e:
        raise SetupError(f"invalid config value: {e}") from e
    return replace(base, **values)


def validate_config(cfg: HarnessConfig) -> HarnessConfig:
    if cfg.timeout <= 0:
        raise SetupError(f"timeout must be positive, got {cfg.timeout}")
    if cfg.truncate <= 0:
        raise SetupError(f"truncate must be positive, got {cfg.truncate}")
    if cfg.progress_every < 0:
        raise SetupError(f"progress_every must be >= 0, got {cfg.progress_every}")
    return cfg


def resolve_config(
    stage: str = DEFAULT_STAGE,
    config_file: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> HarnessConfig:
    cfg = stage_preset(stage)
    if config_file is not None:
        cfg = apply_overrides(cfg, load_config_file(config_file))
    cfg = apply_overrides(cfg, env_overrides(environ))
    cfg = apply_overrides(cfg, overrides or {})
    return validate_config(cfg)
