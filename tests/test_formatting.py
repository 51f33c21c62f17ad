import datetime as dt

import pytest

from runstats.util.formatting import format_duration, format_time


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0:0"),
        (35, "0:35"),
        (35 + 60 * 23, "23:35"),
        (35 + 60 * 23 + 3600 * 11, "11:23:35"),
        (35 + 60 * 23 + 3600 * 11 + 86400 * 4, "4d 11:23:35"),
    ],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


def test_format_duration():
    duration = dt.timedelta(days=3, hours=5, minutes=4, seconds=15)
    assert format_duration(duration) == "3d 5:4:15"


def test_format_duration_drops_fractions():
    assert format_duration(dt.timedelta(seconds=59, milliseconds=900)) == "0:59"
