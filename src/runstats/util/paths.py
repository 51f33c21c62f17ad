# runstats/util/paths.py
from __future__ import annotations

from pathlib import Path

def ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)

def list_gpx_files(root: Path) -> list[Path]:
    """All *.gpx files below `root`, sorted; empty if `root` is not a directory."""
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*.gpx") if p.is_file())
