#!/usr/bin/env python3
"""
runstats: print running statistics for one GPX track.

Reports distance, duration, average heart rate, per-kilometer splits and
an elevation summary. With no file argument, a GPX file under the work
root can be picked interactively with fzf.

Exit codes:
  0  report printed
  1  no GPX file given (or selection cancelled)
  2  the given path is not a file
  3  the file could not be parsed
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from runstats.analyze.track import analyze_track
from runstats.config import default_config, load_config
from runstats.errors import ConfigError, GpxParseError, RunstatsError, TrackConsistencyError
from runstats.util.formatting import format_time
from runstats.util.fzf import fzf_available, fzf_select_paths
from runstats.util.logging import log
from runstats.util.paths import list_gpx_files

EXIT_OK = 0
EXIT_NO_INPUT = 1
EXIT_NOT_A_FILE = 2
EXIT_PARSE_ERROR = 3


def _fmt_num(v: Optional[float]) -> str:
    if v is None:
        return "n/a"
    return f"{v:g}" if float(v).is_integer() else f"{v:.1f}"


def print_report(path: Path, stats: dict, *, tsv: bool, split_distance: float = 1000.0) -> None:
    elev = stats["elevation"]
    if tsv:
        print(
            f"{path}\t"
            f"{stats['name']}\t"
            f"{stats['distance_m']}\t"
            f"{stats['duration_s']}\t"
            f"{stats['avg_hr_bpm']}\t"
            f"{len(stats['splits'])}\t"
            f"{_fmt_num(elev['max_m'])}\t"
            f"{_fmt_num(elev['min_m'])}\t"
            f"{_fmt_num(elev['gain_m'])}"
        )
        return

    print("Track info:")
    if stats["name"]:
        print(f"Name:\t{stats['name']}")
    print(f"Distance (meters):\t{stats['distance_m']}")
    print(f"Duration (seconds):\t{stats['duration_s']} ({format_time(stats['duration_s'])})")
    print(f"Avg heart rate (bpm):\t{stats['avg_hr_bpm']}")

    print("Splits:")
    for i, split in enumerate(stats["splits"]):
        km = (i * split_distance + round(split.distance_m)) / 1000.0
        print(f"{km:g} km:\t{round(split.pace_s)} secs/km\t{round(split.elevation_delta_m)} meters")

    print("Elevation:")
    print(f"Max elevation: {_fmt_num(elev['max_m'])}")
    print(f"Min elevation: {_fmt_num(elev['min_m'])}")
    print(f"Elevation gain: {_fmt_num(elev['gain_m'])}")


def _select_interactively(work_root: Path) -> Optional[Path]:
    if not fzf_available():
        return None
    gpx_files = list_gpx_files(work_root)
    if not gpx_files:
        log(f"No GPX files found under {work_root}")
        return None
    selected = fzf_select_paths(gpx_files, header="Select GPX file to analyze:")
    return selected[0] if selected else None


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="runstats", description="runstats: running statistics for a GPX track.")
    ap.add_argument("gpx", nargs="?", default=None,
                    help="GPX file to analyze. If omitted, pick one under the work root with fzf.")
    ap.add_argument("--work-root", default=None,
                    help="Where to look for GPX files when none is given (default: from runstats config or ~/GPS/_work)")
    ap.add_argument("--split-distance", type=float, default=None,
                    help="Split length in meters (default: from runstats config or 1000)")
    ap.add_argument("--tsv", action="store_true", default=None,
                    help="Print one tab-separated summary row (good for piping).")
    ap.add_argument("--plot", type=Path, default=None,
                    help="Also write a PNG chart of the splits to this path.")

    args = ap.parse_args(argv)

    try:
        cfg = load_config()
    except ConfigError as e:
        log(f"Warning: runstats config unavailable ({e}); using defaults.")
        cfg = default_config()

    work_root = Path(args.work_root).expanduser() if args.work_root else cfg.work_root
    split_distance = args.split_distance if args.split_distance and args.split_distance > 0 else cfg.splits.distance_m
    tsv = cfg.tsv if args.tsv is None else args.tsv

    if args.gpx:
        path = Path(args.gpx).expanduser()
    else:
        try:
            path = _select_interactively(work_root)
        except RunstatsError as e:
            log(str(e))
            path = None
        if path is None:
            log("Too few arguments")
            return EXIT_NO_INPUT

    if not path.is_file():
        log(f"File doesn't exist: {path}")
        return EXIT_NOT_A_FILE

    try:
        stats = analyze_track(
            path,
            split_distance=split_distance,
            min_partial=cfg.splits.min_partial_m,
        )
    except (GpxParseError, TrackConsistencyError) as e:
        log(f"Parsing error: {e}")
        return EXIT_PARSE_ERROR

    if tsv:
        print("file\tname\tdistance_m\tduration_s\tavg_hr_bpm\tsplits\tmax_ele_m\tmin_ele_m\tgain_m")
    print_report(path, stats, tsv=tsv, split_distance=split_distance)

    if args.plot is not None:
        from runstats.visualize.plot import plot_splits

        out = plot_splits(stats["splits"], args.plot, title=stats["name"], split_distance=split_distance)
        log(f"Wrote: {out}")

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
