from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SCORING_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "scoring.yaml"
REQUIRED_SECTIONS = ("dimensions", "levels", "fallback", "plan")

_cached: dict[str, Any] | None = None


class ScoringConfigError(RuntimeError):
    pass


def _config_path() -> Path:
    override = os.getenv("SCORING_CONFIG_PATH")
    return Path(override) if override else DEFAULT_SCORING_CONFIG_PATH


def _load(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ScoringConfigError(f"Scoring config not found at '{path}'.") from exc
    except (OSError, yaml.YAMLError) as exc:
        raise ScoringConfigError(f"Could not load scoring config '{path}': {exc}") from exc

    if not isinstance(data, dict):
        raise ScoringConfigError(f"Scoring config '{path}' must be a mapping at the top level.")
    missing = [section for section in REQUIRED_SECTIONS if not isinstance(data.get(section), dict)]
    if missing:
        raise ScoringConfigError(f"Scoring config '{path}' is missing sections: {', '.join(missing)}")
    return data


def get_scoring_config() -> dict[str, Any]:
    """Scoring policy from config/scoring.yaml, loaded once per process."""
    global _cached
    if _cached is None:
        _cached = _load(_config_path())
    return _cached


def get_scoring_value(path: str, default: Any = None) -> Any:
    """Look up a nested value by dotted path, e.g. ``fallback.base_score``."""
    node: Any = get_scoring_config()
    for part in filter(None, path.split(".")):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node if path else default


def reset_scoring_cache() -> None:
    global _cached
    _cached = None
