# -*- coding: utf-8 -*-
# femexec/interface/formats.py

"""
Project: femexec
Date: 3/4/2026

Purpose
-------
Tiny I/O helpers for solver result files: open plain or gzip-compressed text as UTF-8,
detect simple CSV-like delimiters, and recognize comment lines.

Notes
-----
- Recorder outputs are usually whitespace-delimited; ',' and ';' are accepted as well.
- Comment lines start with '#' or '%'.
"""

import gzip
import io
from typing import IO, Optional

COMMENT_PREFIXES = ("#", "%")


def open_text(path: str) -> IO[str]:
    """
    Open a text file as UTF-8, transparently supporting gzip-compressed inputs.

    Raises
    ------
    FileNotFoundError, PermissionError, OSError
        Propagated from the underlying open if the file cannot be accessed.
    """
    if str(path).lower().endswith(".gz"):
        return io.TextIOWrapper(gzip.open(path, "rb"), encoding="utf-8", newline="")
    return open(path, "r", encoding="utf-8", newline="")


def sniff_delim(line: str) -> Optional[str]:
    """Return ',' or ';' if present in `line`; None means whitespace-delimited."""
    if "," in line:
        return ","
    if ";" in line:
        return ";"
    return None


def is_blank_or_comment(line: str) -> bool:
    s = line.strip()
    return not s or s.startswith(COMMENT_PREFIXES)
