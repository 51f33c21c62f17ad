# runstats/formats/gpx_parser.py
"""
Streaming GPX -> Track parser.

The parser is a small state machine fed with structural events
(StartTag / Text / EndTag, see runstats.formats.gpx). It knows which
containers are currently open, which recognized tag the next text
belongs to, and the point and segment being assembled.

Containment rules
-----------------
Every recognized tag lists the containers that must be open before it
may start (_REQUIRES). Container tags additionally open a context of
their own (_OPENS) that is closed again by the matching end tag.

    gpx         -> opens DOCUMENT
    metadata    needs DOCUMENT              -> opens METADATA
    trk         -> opens TRACK
    name        needs DOCUMENT, TRACK
    trkseg      -> opens SEGMENT (new TrackSegment)
    trkpt       needs DOCUMENT, TRACK, SEGMENT  -> opens POINT (lat/lon required)
    ele/hr/cad  needs POINT
    time        needs DOCUMENT (metadata time or point time)

Point order
-----------
Devices occasionally write samples out of order. When a point's time is
earlier than the latest time among the points already added to the
current segment (points without a time do not count), the segment is
marked and stably sorted by time once it is closed.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Iterable, Optional

from runstats.errors import (
    GpxAttributeError,
    GpxStructureError,
    GpxTimeFormatError,
    GpxValueError,
)
from runstats.formats.gpx import (
    EndTag,
    GpxEvent,
    GpxSource,
    GpxTag,
    StartTag,
    Text,
    Track,
    TrackPoint,
    TrackSegment,
    iter_events,
    lookup_tag,
    parse_decimal,
    parse_gpx_time,
    parse_uint8,
)


class Context(enum.Enum):
    DOCUMENT = "gpx"
    METADATA = "metadata"
    TRACK = "trk"
    SEGMENT = "trkseg"
    POINT = "trkpt"


_OPENS = {
    GpxTag.DOCUMENT: Context.DOCUMENT,
    GpxTag.METADATA: Context.METADATA,
    GpxTag.TRACK: Context.TRACK,
    GpxTag.SEGMENT: Context.SEGMENT,
    GpxTag.POINT: Context.POINT,
}

_REQUIRES = {
    GpxTag.METADATA: frozenset({Context.DOCUMENT}),
    GpxTag.NAME: frozenset({Context.DOCUMENT, Context.TRACK}),
    GpxTag.POINT: frozenset({Context.DOCUMENT, Context.TRACK, Context.SEGMENT}),
    GpxTag.ELEVATION: frozenset({Context.POINT}),
    GpxTag.TIME: frozenset({Context.DOCUMENT}),
    GpxTag.HEART_RATE: frozenset({Context.POINT}),
    GpxTag.CADENCE: frozenset({Context.POINT}),
}


def _point_sort_key(p: TrackPoint):
    # untimed points first; tuples of equal flags never compare None with None
    return (p.time is not None, p.time)


class GpxTrackParser:
    """
    Incremental parser: feed() events one by one, then close() for the Track.

    Any error aborts the parse; the parser must not be used afterwards.
    """

    def __init__(self) -> None:
        self._open: frozenset[Context] = frozenset()
        self._current_tag: Optional[GpxTag] = None

        self._name = ""
        self._start_time = None
        self._segments: list[TrackSegment] = []

        self._points: Optional[list[TrackPoint]] = None
        self._needs_sort = False
        # latest time among finished points of the current segment
        self._latest_time = None
        self._point: Optional[TrackPoint] = None

    # -- public API ---------------------------------------------------------
    def feed(self, event: GpxEvent) -> None:
        if isinstance(event, StartTag):
            self._on_start(event)
        elif isinstance(event, Text):
            self._on_text(event.content)
        elif isinstance(event, EndTag):
            self._on_end(event)
        else:
            raise TypeError(f"not a GPX event: {event!r}")

    def close(self) -> Track:
        """Finish parsing and return the Track. A segment left open is kept."""
        self._finish_segment()
        return Track(
            name=self._name,
            start_time=self._start_time,
            segments=tuple(self._segments),
        )

    # -- event handlers -----------------------------------------------------
    def _on_start(self, event: StartTag) -> None:
        tag = lookup_tag(event.namespace, event.local_name)
        if tag is GpxTag.IGNORED:
            return

        missing = _REQUIRES.get(tag, frozenset()) - self._open
        if missing:
            wanted = ", ".join(sorted(f"<{c.value}>" for c in missing))
            raise GpxStructureError(f"<{event.local_name}> must be inside {wanted}")

        self._current_tag = tag
        context = _OPENS.get(tag)
        if context is not None:
            self._open = self._open | {context}

        if tag is GpxTag.SEGMENT:
            self._finish_segment()
            self._points = []
            self._needs_sort = False
            self._latest_time = None
        elif tag is GpxTag.POINT:
            self._point = self._start_point(event.attributes)

    def _on_text(self, text: str) -> None:
        tag = self._current_tag

        if tag is GpxTag.NAME:
            self._name = text
        elif tag is GpxTag.TIME:
            self._on_time(text)
        elif tag is GpxTag.ELEVATION:
            self._point = dataclasses.replace(self._point, ele=_element_decimal("ele", text))
        elif tag is GpxTag.HEART_RATE:
            self._point = dataclasses.replace(self._point, heart_rate=_element_uint8("hr", text))
        elif tag is GpxTag.CADENCE:
            self._point = dataclasses.replace(self._point, cadence=_element_uint8("cad", text))

    def _on_end(self, event: EndTag) -> None:
        tag = lookup_tag(event.namespace, event.local_name)
        if tag is GpxTag.IGNORED:
            return
        if tag is GpxTag.POINT and (self._point is None or self._points is None):
            raise GpxStructureError("</trkpt> without an open <trkpt> inside <trkseg>")

        self._current_tag = None
        context = _OPENS.get(tag)
        if context is not None:
            self._open = self._open - {context}

        if tag is GpxTag.POINT:
            self._points.append(self._point)
            when = self._point.time
            if when is not None and (self._latest_time is None or when > self._latest_time):
                self._latest_time = when
            self._point = None
        elif tag is GpxTag.SEGMENT:
            self._finish_segment()

    # -- helpers ------------------------------------------------------------
    def _start_point(self, attributes: dict[str, str]) -> TrackPoint:
        if len(attributes) < 2 or "lat" not in attributes or "lon" not in attributes:
            raise GpxAttributeError("<trkpt> requires both lat and lon attributes")
        return TrackPoint(
            lat=_attribute_decimal("lat", attributes["lat"]),
            lon=_attribute_decimal("lon", attributes["lon"]),
        )

    def _on_time(self, text: str) -> None:
        try:
            when = parse_gpx_time(text)
        except ValueError as e:
            raise GpxTimeFormatError(f"<time>: {e}") from e

        if Context.METADATA in self._open:
            self._start_time = when
        elif Context.POINT in self._open:
            self._point = dataclasses.replace(self._point, time=when)
            if self._latest_time is not None and when < self._latest_time:
                self._needs_sort = True

    def _finish_segment(self) -> None:
        if self._points is None:
            return
        points = self._points
        if self._needs_sort:
            points = sorted(points, key=_point_sort_key)
        self._segments.append(TrackSegment(points=tuple(points)))
        self._points = None
        self._needs_sort = False
        self._latest_time = None


def _attribute_decimal(name: str, text: str) -> float:
    try:
        return parse_decimal(text)
    except ValueError as e:
        raise GpxAttributeError(f"<trkpt {name}=...>: {e}") from e


def _element_decimal(name: str, text: str) -> float:
    try:
        return parse_decimal(text)
    except ValueError as e:
        raise GpxValueError(f"<{name}>: {e}") from e


def _element_uint8(name: str, text: str) -> int:
    try:
        return parse_uint8(text)
    except ValueError as e:
        raise GpxValueError(f"<{name}>: {e}") from e


def parse_events(events: Iterable[GpxEvent]) -> Track:
    """Run a fresh parser over an event stream and return the Track."""
    parser = GpxTrackParser()
    for event in events:
        parser.feed(event)
    return parser.close()


def read_gpx(source: GpxSource) -> Track:
    """
    Parse a GPX file (path or binary file object) into a Track.

    Raises:
      GpxParseError subclasses; no partial Track is ever returned.
    """
    return parse_events(iter_events(source))
