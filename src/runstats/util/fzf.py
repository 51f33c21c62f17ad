# runstats/util/fzf.py
"""
Helper functions for path selection using `fzf`
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which

from runstats.errors import FzfNotFoundError, RunstatsError


def fzf_available() -> bool:
    return which("fzf") is not None


def fzf_select_paths(
        paths: list[Path], *,
        header: str,
) -> list[Path]:
    """
    Let the user pick one of `paths` in fzf (searching by file name).

    Returns the selected path as a one-element list, or [] if the selection was cancelled.
    """
    if not fzf_available():
        raise FzfNotFoundError("fzf not found on PATH")

    lines = [f"{p.name}\t{p}" for p in paths]
    input_text = "\n".join(lines) + "\n"
    selected: list[Path] = []

    cmd = [
        "fzf",
        "--delimiter=\t",
        "--nth=1",
        "--with-nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--header", header,
    ]

    proc = subprocess.run(
        cmd,
        input=input_text.encode(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    # 130: cancelled with Esc / Ctrl-C
    if proc.returncode not in (0, 1, 130):
        raise RunstatsError(proc.stderr.decode(errors="replace"))

    out = proc.stdout.decode().strip()
    if not out:
        return []

    for line in out.splitlines():
        line = line.strip()
        if not line:
            continue
        # line is: "name<TAB>fullpath"
        path_str = line.split("\t", 1)[1] if "\t" in line else line
        selected.append(Path(path_str).expanduser().resolve())
    return selected
