# runstats/errors

"""
runstats.errors

Central exception hierarchy for runstats.

Rationale:
  - Parsing and analysis code raises specific, meaningful errors.
  - Callers can catch RunstatsError (broad) or specific subclasses (narrow).
"""


class RunstatsError(RuntimeError):
    """Base class for all runstats runtime errors."""


# ---- GPX parsing errors ------------------------

class GpxParseError(RunstatsError):
    """The GPX document could not be turned into a Track."""

class GpxStructureError(GpxParseError):
    """A tag was found in a context where it is not allowed (e.g. <trkpt> outside <trkseg>)."""

class GpxAttributeError(GpxParseError):
    """A required attribute is missing or is not a valid number."""

class GpxValueError(GpxParseError):
    """Element text is not a valid number of the expected type."""

class GpxTimeFormatError(GpxParseError):
    """Timestamp text is not a valid RFC 3339 date-time."""

class GpxReadError(GpxParseError):
    """The input could not be read or is not well-formed XML."""


# ---- Statistics errors -------------------------

class TrackConsistencyError(RunstatsError):
    """A Track violates an invariant the parser guarantees (points out of time order)."""


# ---- CLI / environment errors ------------------

class FzfNotFoundError(RunstatsError):
    """fzf is required but not available on PATH."""

class ConfigError(RunstatsError):
    """A configuration file exists but could not be parsed."""
