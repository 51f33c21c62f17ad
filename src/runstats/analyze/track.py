# runstats/analyze/track.py
"""
Track analysis functions for runstats

Every function takes a finished, immutable Track and is pure. Distances
and durations are accumulated per segment: the gap between the last
point of one segment and the first point of the next never counts.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from runstats.analyze.geometry import point_distance
from runstats.errors import TrackConsistencyError
from runstats.formats.gpx import Track, TrackPoint, format_gpx_time
from runstats.formats.gpx_parser import read_gpx

SPLIT_DISTANCE_M = 1000.0
MIN_PARTIAL_SPLIT_M = 100.0


@dataclass(frozen=True)
class Split:
    distance_m: float         # <= split distance; only the last split may be shorter
    pace_s: float             # seconds per split distance (extrapolated for a partial split)
    elevation_delta_m: float  # end elevation minus start elevation


@dataclass(frozen=True)
class ElevationStats:
    max_m: Optional[float]  # None when the track has no points
    min_m: Optional[float]
    gain_m: float


def iter_pairs(track: Track) -> Iterator[tuple[TrackPoint, TrackPoint]]:
    """Consecutive point pairs, never crossing a segment boundary."""
    for seg in track.segments:
        yield from zip(seg.points, seg.points[1:])


def seconds_between(p0: TrackPoint, p1: TrackPoint) -> float:
    """
    Elapsed seconds from p0 to p1; 0 if either point has no time.

    Raises:
      TrackConsistencyError if p1 is earlier than p0.
    """
    if p0.time is None or p1.time is None:
        return 0.0
    delta = (p1.time - p0.time).total_seconds()
    if delta < 0:
        raise TrackConsistencyError(
            f"points out of time order: {format_gpx_time(p0.time)} -> {format_gpx_time(p1.time)}"
        )
    return delta


def track_distance(track: Track) -> int:
    """Total elevation-adjusted distance in whole meters."""
    total = sum(point_distance(p0, p1) for p0, p1 in iter_pairs(track))
    if not total > 0:  # also catches NaN
        return 0
    return math.floor(total)


def track_duration(track: Track) -> dt.timedelta:
    """Sum of the time between consecutive points of each segment."""
    total = dt.timedelta(0)
    for p0, p1 in iter_pairs(track):
        if seconds_between(p0, p1) > 0:
            total += p1.time - p0.time
    return total


def average_heart_rate(track: Track) -> int:
    """
    Time-weighted average heart rate in bpm.

    Samples of 0 are missing data. Between two valid samples the heart rate
    is taken to change linearly (trapezoid rule); a valid sample without a
    valid successor counts as one second.
    """
    weighted = 0.0
    seconds = 0.0

    for seg in track.segments:
        points = seg.points
        for i, p in enumerate(points):
            if p.heart_rate == 0:
                continue
            nxt = points[i + 1] if i + 1 < len(points) else None
            if nxt is None or nxt.heart_rate == 0:
                weighted += p.heart_rate
                seconds += 1.0
            else:
                dt_s = seconds_between(p, nxt)
                weighted += (p.heart_rate + nxt.heart_rate) * dt_s / 2.0
                seconds += dt_s

    if seconds <= 0:
        return 0
    return max(0, min(255, math.floor(weighted / seconds)))


def track_splits(
        track: Track, *,
        split_distance: float = SPLIT_DISTANCE_M,
        min_partial: float = MIN_PARTIAL_SPLIT_M,
) -> list[Split]:
    """
    Cut the track into fixed-distance splits.

    A split boundary that falls between two points is placed by linear
    interpolation of time and elevation along that pair; the rest of the
    pair starts the next split. A leftover of at least `min_partial` meters
    becomes a final, shorter split whose pace is scaled up to the full
    split distance.
    """
    splits: list[Split] = []
    start_ele: Optional[float] = None
    last_ele = 0.0
    acc_d = 0.0
    acc_t = 0.0

    for p0, p1 in iter_pairs(track):
        if start_ele is None:
            start_ele = p0.ele

        d = point_distance(p0, p1)
        t = seconds_between(p0, p1)
        e0, e1 = p0.ele, p1.ele
        last_ele = e1

        # one pass per split boundary inside this pair (long gaps may cross several)
        while acc_d + d >= split_distance and d > 0:
            f = (split_distance - acc_d) / d
            t_at = t * f
            e_at = e0 + (e1 - e0) * f
            splits.append(Split(
                distance_m=split_distance,
                pace_s=acc_t + t_at,
                elevation_delta_m=e_at - start_ele,
            ))
            acc_d = 0.0
            acc_t = 0.0
            start_ele = e_at
            d -= d * f
            t -= t_at
            e0 = e_at

        acc_d += d
        acc_t += t

    if acc_d >= min_partial and acc_t > 0:
        splits.append(Split(
            distance_m=acc_d,
            pace_s=acc_t * split_distance / acc_d,
            elevation_delta_m=last_ele - start_ele,
        ))

    return splits


def elevation_stats(track: Track) -> ElevationStats:
    """Max/min elevation over all points and total climb between consecutive points."""
    elevations = [p.ele for p in track.iter_points()]
    if not elevations:
        return ElevationStats(max_m=None, min_m=None, gain_m=0.0)

    gain = sum(max(0.0, p1.ele - p0.ele) for p0, p1 in iter_pairs(track))
    return ElevationStats(max_m=max(elevations), min_m=min(elevations), gain_m=gain)


def analyze_track(
        gpx_path: Path, *,
        split_distance: float = SPLIT_DISTANCE_M,
        min_partial: float = MIN_PARTIAL_SPLIT_M,
) -> dict:
    """Parse a GPX file and return every statistic as a plain dict."""
    track = read_gpx(gpx_path)
    elev = elevation_stats(track)

    return {
        "name": track.name,
        "start_time": format_gpx_time(track.start_time) if track.start_time else None,
        "points": track.point_count,
        "segments": len(track.segments),
        "distance_m": track_distance(track),
        "duration_s": int(track_duration(track).total_seconds()),
        "avg_hr_bpm": average_heart_rate(track),
        "splits": track_splits(track, split_distance=split_distance, min_partial=min_partial),
        "elevation": {
            "max_m": elev.max_m,
            "min_m": elev.min_m,
            "gain_m": elev.gain_m,
        },
    }
