# runstats/util/logging.py
from __future__ import annotations

import datetime
import sys
from typing import TextIO, Optional


def log(msg: str, *, stream: Optional[TextIO] = None) -> None:
    """Print a timestamped log line (local time with timezone), to stderr by default."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}", file=stream if stream is not None else sys.stderr)
