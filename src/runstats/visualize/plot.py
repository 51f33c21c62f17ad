# runstats/visualize/plot.py
"""
Plotting routines for runstats
"""

from __future__ import annotations

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from runstats.util.paths import ensure_dir


def plot_splits(splits, out_path: Path, *, title: str = "", split_distance: float = 1000.0) -> Path:
    """
    Write a PNG with split pace (bars) and elevation change (line) per split.

    Returns the written path.
    """
    markers = [
        (i * split_distance + s.distance_m) / 1000.0
        for i, s in enumerate(splits)
    ]
    labels = [f"{m:g}" for m in markers]
    paces = [s.pace_s for s in splits]
    deltas = [s.elevation_delta_m for s in splits]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(labels, paces, color="tab:blue")
    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Pace (s/km)")
    ax.set_title(title or "Splits")

    ax2 = ax.twinx()
    ax2.plot(labels, deltas, color="tab:orange", marker="o")
    ax2.axhline(0.0, color="tab:gray", linewidth=0.5)
    ax2.set_ylabel("Elevation change (m)")

    fig.tight_layout()
    ensure_dir(out_path.parent)
    fig.savefig(out_path, format="png")
    plt.close(fig)
    return out_path
