import datetime as dt
from pathlib import Path

import pytest

GPX_OPEN = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<gpx version="1.1" creator="runstats-tests"'
    ' xmlns="http://www.topografix.com/GPX/1/1"'
    ' xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">\n'
)
GPX_CLOSE = "</gpx>\n"

T0 = dt.datetime(2020, 4, 22, 16, 0, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def gpx_doc():
    """Wrap body XML in a <gpx> root that declares the GPX and gpxtpx namespaces."""
    def _doc(body: str) -> str:
        return GPX_OPEN + body + GPX_CLOSE
    return _doc


@pytest.fixture
def write_gpx(tmp_path: Path, gpx_doc):
    """Write a GPX document built from `body` and return its path."""
    def _write(body: str, name: str = "track.gpx") -> Path:
        path = tmp_path / name
        path.write_text(gpx_doc(body), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def at():
    """Seconds offset -> tz-aware UTC datetime."""
    def _at(seconds: float) -> dt.datetime:
        return T0 + dt.timedelta(seconds=seconds)
    return _at
