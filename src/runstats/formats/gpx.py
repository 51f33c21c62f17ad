# runstats/formats/gpx.py
"""
GPX helpers for runstats

This module is intentionally format-focused:
- GPX and TrackPointExtension namespace handling
- mapping (namespace, local name) pairs onto a closed set of tags
- decoding attribute/text values (decimals, 8-bit counters, RFC 3339 times)
- the immutable Track value types produced by the parser
- turning an XML source into a lazy stream of structural events

Key design principle:
  The containment rules (what may appear where) live in gpx_parser.py.
  Nothing in here knows about parser state.
"""

from __future__ import annotations

import datetime as _dt
import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterator, Optional, Union
from xml.etree import ElementTree as ET

from runstats.errors import GpxReadError

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}

# Garmin heart rate / cadence extension. v2 uses the same element names.
TPX_NAMESPACES = (
    "http://www.garmin.com/xmlschemas/TrackPointExtension/v1",
    "http://www.garmin.com/xmlschemas/TrackPointExtension/v2",
)


def qn(tag: str) -> str:
    """
    Build an ElementTree-qualified name for a GPX tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    """
    return f"{{{GPX_NS['gpx']}}}{tag}"


def split_qname(qname: str) -> tuple[Optional[str], str]:
    """Split an ElementTree "{uri}local" name into (uri, local). Unqualified names get uri None."""
    if qname.startswith("{"):
        uri, _, local = qname[1:].partition("}")
        return uri, local
    return None, qname


# ---------------------------------------------------------------------------
# Tag lookup
# ---------------------------------------------------------------------------
class GpxTag(enum.Enum):
    DOCUMENT = "gpx"
    METADATA = "metadata"
    TRACK = "trk"
    NAME = "name"
    SEGMENT = "trkseg"
    POINT = "trkpt"
    ELEVATION = "ele"
    TIME = "time"
    HEART_RATE = "hr"
    CADENCE = "cad"
    IGNORED = None


_GPX_TAGS = {
    "gpx": GpxTag.DOCUMENT,
    "metadata": GpxTag.METADATA,
    "trk": GpxTag.TRACK,
    "name": GpxTag.NAME,
    "trkseg": GpxTag.SEGMENT,
    "trkpt": GpxTag.POINT,
    "ele": GpxTag.ELEVATION,
    "time": GpxTag.TIME,
}

_TPX_TAGS = {
    "hr": GpxTag.HEART_RATE,
    "cad": GpxTag.CADENCE,
}

_TAG_TABLES = {GPX_NS["gpx"]: _GPX_TAGS}
_TAG_TABLES.update({ns: _TPX_TAGS for ns in TPX_NAMESPACES})


def lookup_tag(namespace: Optional[str], local_name: str) -> GpxTag:
    """
    Resolve a namespaced element name to a GpxTag.

    Unknown namespaces and unknown local names resolve to GpxTag.IGNORED.
    Elements without a namespace are never recognized.
    """
    table = _TAG_TABLES.get(namespace) if namespace else None
    if table is None:
        return GpxTag.IGNORED
    return table.get(local_name, GpxTag.IGNORED)


# ---------------------------------------------------------------------------
# Value decoding
# ---------------------------------------------------------------------------
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_UINT_RE = re.compile(r"\+?[0-9]+")
_RFC3339_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt ]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})(?:\.(?P<frac>\d+))?"
    r"(?:(?P<utc>[Zz])|(?P<sign>[+-])(?P<off_h>\d{2}):(?P<off_m>\d{2}))",
    re.ASCII,
)


def parse_decimal(text: str) -> float:
    """
    Parse a plain decimal number ("478.2", "-0.5", "1e3").

    Rejects what float() would otherwise accept but GPX does not carry:
    "nan", "inf", digit separators ("1_000").

    Raises:
      ValueError
    """
    s = (text or "").strip()
    if not _DECIMAL_RE.fullmatch(s):
        raise ValueError(f"not a decimal number: {text!r}")
    return float(s)


def parse_uint8(text: str) -> int:
    """
    Parse an unsigned integer in 0..255 (heart rate, cadence).

    Raises:
      ValueError
    """
    s = (text or "").strip()
    if not _UINT_RE.fullmatch(s):
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(s)
    if value > 255:
        raise ValueError(f"out of range 0..255: {text!r}")
    return value


def parse_gpx_time(text: str) -> _dt.datetime:
    """
    Parse an RFC 3339 timestamp as found in GPX <time> nodes and return it in UTC.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T23:14:44+02:00"

    A UTC offset (or Z) is mandatory. Fractions beyond microseconds are truncated.

    Raises:
      ValueError
    """
    s = (text or "").strip()
    m = _RFC3339_RE.fullmatch(s)
    if not m:
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")

    if m.group("utc"):
        tz = _dt.timezone.utc
    else:
        offset = _dt.timedelta(hours=int(m.group("off_h")), minutes=int(m.group("off_m")))
        if offset >= _dt.timedelta(hours=24) or int(m.group("off_m")) > 59:
            raise ValueError(f"invalid UTC offset: {text!r}")
        tz = _dt.timezone(-offset if m.group("sign") == "-" else offset)

    frac = (m.group("frac") or "")[:6].ljust(6, "0")
    date = _dt.date.fromisoformat(m.group("date"))
    dt = _dt.datetime(
        date.year, date.month, date.day,
        int(m.group("hour")), int(m.group("minute")), int(m.group("second")),
        int(frac), tzinfo=tz,
    )
    return dt.astimezone(_dt.timezone.utc)


def format_gpx_time(dt: _dt.datetime) -> str:
    """
    Format a tz-aware datetime as GPX time (UTC with Z).
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)
    dt_utc = dt.astimezone(_dt.timezone.utc)
    return dt_utc.replace(microsecond=0).isoformat().replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Track values
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class TrackPoint:
    """One recorded sample. heart_rate/cadence of 0 mean "not recorded"."""
    lat: float
    lon: float
    ele: float = 0.0
    time: Optional[_dt.datetime] = None
    heart_rate: int = 0
    cadence: int = 0


@dataclass(frozen=True)
class TrackSegment:
    """A continuous recording run (one <trkseg>)."""
    points: tuple[TrackPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Track:
    """
    One recorded activity.

    start_time comes from <metadata><time> and is independent of the point times.
    """
    name: str = ""
    start_time: Optional[_dt.datetime] = None
    segments: tuple[TrackSegment, ...] = field(default_factory=tuple)

    def iter_points(self) -> Iterator[TrackPoint]:
        """All points across all segments in document order."""
        for seg in self.segments:
            yield from seg.points

    @property
    def point_count(self) -> int:
        return sum(len(seg) for seg in self.segments)


# ---------------------------------------------------------------------------
# Structural events
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StartTag:
    namespace: Optional[str]
    local_name: str
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class EndTag:
    namespace: Optional[str]
    local_name: str


GpxEvent = Union[StartTag, Text, EndTag]
GpxSource = Union[str, Path, IO[bytes]]


def iter_events(source: GpxSource) -> Iterator[GpxEvent]:
    """
    Stream a GPX document as StartTag / Text / EndTag events.

    - Attribute keys are reduced to their local names ("lat", "lon").
    - Text is reported for leaf elements only, right before their EndTag,
      and only when it is not blank.
    - Finished elements are detached from their parent, so memory use is
      bounded by nesting depth rather than file size.

    Raises:
      GpxReadError if the source cannot be read or is not well-formed XML.
    """
    if isinstance(source, Path):
        source = str(source)

    # [element, has_children] for every open element
    open_elems: list[list] = []

    try:
        for event, elem in ET.iterparse(source, events=("start", "end")):
            namespace, local = split_qname(elem.tag)
            if event == "start":
                if open_elems:
                    open_elems[-1][1] = True
                open_elems.append([elem, False])
                attrs = {split_qname(k)[1]: v for k, v in elem.attrib.items()}
                yield StartTag(namespace, local, attrs)
                continue

            _, has_children = open_elems.pop()
            if not has_children:
                text = (elem.text or "").strip()
                if text:
                    yield Text(text)
            yield EndTag(namespace, local)
            if open_elems:
                open_elems[-1][0].remove(elem)
    except ET.ParseError as e:
        raise GpxReadError(f"Malformed GPX document: {e}") from e
    except OSError as e:
        raise GpxReadError(f"Cannot read GPX input: {e}") from e
