"""
runstats configuration loader

This module centralizes *all* configuration handling for runstats.

Design goals:
- Keep the CLI Unix-friendly: CLI flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/runstats/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by runstats.analyze.gpx_analyze)
2) Environment variables (RUNSTATS_*)
3) User config: ~/.config/runstats/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

Example config.toml:

    [paths]
    work_root = "~/GPS/_work"

    [splits]
    distance_m = 1000
    min_partial_m = 100

    [report]
    tsv = false

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from runstats.errors import ConfigError

DEFAULT_SPLIT_DISTANCE_M = 1000.0
DEFAULT_MIN_PARTIAL_M = 100.0


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with a clear, user-facing message.
    """
    if not path.is_file():
        return {}

    try:
        try:
            # Python 3.11+ standard library
            import tomllib
        except ModuleNotFoundError:
            import tomli as tomllib
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (OSError, ValueError) as e:
        # TOMLDecodeError is a ValueError subclass in both tomllib and tomli
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "splits.distance_m")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str) and v.strip():
        return Path(v).expanduser()
    return None


def _as_bool(v: Any) -> Optional[bool]:
    """
    Coerce loosely-typed config values into booleans.

    Accepts the usual truthy / falsy spellings so TOML and environment
    variables behave the same. Returns None for anything unrecognized.
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    return None


def _as_positive_float(v: Any) -> Optional[float]:
    """Coerce a number or numeric string into a float > 0; None otherwise."""
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    if not f > 0 or f == float("inf"):
        return None
    return f


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the runstats repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_work_root() -> Path:
    """Where interactive selection looks for GPX files if nothing is configured."""
    return Path.home() / "GPS" / "_work"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SplitConfig:
    distance_m: float = DEFAULT_SPLIT_DISTANCE_M
    min_partial_m: float = DEFAULT_MIN_PARTIAL_M


@dataclass(frozen=True)
class RunstatsConfig:
    """
    Fully merged runstats configuration.

    Attributes:
    - work_root: directory searched for GPX files when none is given
    - splits: split length and minimum partial split length
    - tsv: print tab-separated reports by default
    - source: provenance map showing where each value came from
    """

    work_root: Path
    splits: SplitConfig
    tsv: bool
    source: dict[str, str]


# (dotted key, env var, coercion)
_SETTINGS = (
    ("paths.work_root", "RUNSTATS_WORK_ROOT", _as_path),
    ("splits.distance_m", "RUNSTATS_SPLIT_DISTANCE_M", _as_positive_float),
    ("splits.min_partial_m", "RUNSTATS_MIN_PARTIAL_M", _as_positive_float),
    ("report.tsv", "RUNSTATS_TSV", _as_bool),
)


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> RunstatsConfig:
    """
    Load and merge all runstats configuration.

    This function is the single authoritative entry point
    for configuration access.
    """
    if environ is None:
        environ = dict(os.environ)

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "runstats" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    values: dict[str, Any] = {
        "paths.work_root": default_work_root(),
        "splits.distance_m": DEFAULT_SPLIT_DISTANCE_M,
        "splits.min_partial_m": DEFAULT_MIN_PARTIAL_M,
        "report.tsv": False,
    }
    src = {key: "default" for key in values}

    # Lowest to highest precedence; invalid values are skipped, not fatal
    layers = (
        (f"repo:{repo_config_path}", lambda key, _env: _deep_get(repo_cfg, key)),
        (f"user:{user_config_path}", lambda key, _env: _deep_get(user_cfg, key)),
        ("env", lambda _key, env: environ.get(env)),
    )
    for label, lookup in layers:
        for key, env, coerce in _SETTINGS:
            v = coerce(lookup(key, env))
            if v is None:
                continue
            values[key] = v
            src[key] = f"env:{env}" if label == "env" else label

    return RunstatsConfig(
        work_root=values["paths.work_root"].expanduser(),
        splits=SplitConfig(
            distance_m=values["splits.distance_m"],
            min_partial_m=values["splits.min_partial_m"],
        ),
        tsv=values["report.tsv"],
        source=src,
    )


def default_config() -> RunstatsConfig:
    """Hard defaults only (used when the config files cannot be read)."""
    return RunstatsConfig(
        work_root=default_work_root(),
        splits=SplitConfig(),
        tsv=False,
        source={},
    )
