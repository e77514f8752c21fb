# -*- coding: utf-8 -*-
# femexec/interface/outputs.py

"""
Project: femexec
Date: 3/4/2026 (Updated: 3/10/2026)

Purpose
-------
Parse solver result files (displacement / force recorders) into rectangular NumPy
matrices, and run that parsing as a background task so a polling loop can keep going
while several files are read concurrently.

Main Tasks
----------
    1. `read_matrix(path)`: skip blank/comment lines, detect the delimiter per line,
       convert every token to float and require a constant row width.
    2. `OutputFileParser`: parse one file on a daemon thread, expose a completion flag
       and the resulting matrix.

Notes
-----
- Parse failures never escape the parser task: they are logged, the task completes,
  and `data` is an empty (0, 0) array.
- `data` is None until the task has completed and is not modified afterwards.
"""

import logging
import os
import threading
import zlib
from typing import List, Optional

import numpy as np

from .formats import is_blank_or_comment, open_text, sniff_delim

logger = logging.getLogger(__name__)


class OutputParseError(RuntimeError):
    """A result file is missing, non-numeric or not rectangular."""


def _split(line: str) -> List[str]:
    delim = sniff_delim(line)
    if delim:
        return [p.strip() for p in line.strip().split(delim) if p.strip()]
    return line.split()


def read_matrix(path: str) -> np.ndarray:
    """
    Read a numeric result file into a 2D float64 array.

    Args
    ----
    path : str
        Result file path ('.gz' supported).

    Returns
    -------
    np.ndarray
        (rows, cols) float64 array; (0, 0) if the file holds no data lines.

    Raises
    ------
    OutputParseError
        If the file cannot be opened or decompressed, a token is not numeric, or rows
        are ragged.
    """
    rows: List[List[float]] = []
    width = None
    try:
        with open_text(path) as f:
            for lineno, line in enumerate(f, start=1):
                if is_blank_or_comment(line):
                    continue
                parts = _split(line)
                try:
                    values = [float(x) for x in parts]
                except ValueError:
                    raise OutputParseError(
                        "{}:{}: non-numeric value in {!r}".format(path, lineno, line.strip())
                    )
                if width is None:
                    width = len(values)
                elif len(values) != width:
                    raise OutputParseError(
                        "{}:{}: expected {} columns, got {}".format(path, lineno, width, len(values))
                    )
                rows.append(values)
    except (OSError, UnicodeDecodeError, EOFError, zlib.error) as e:
        raise OutputParseError("Unable to read {}: {}".format(path, e)) from e

    if not rows:
        return np.empty((0, 0), dtype=np.float64)
    return np.asarray(rows, dtype=np.float64)


class OutputFileParser:
    """
    Background parser for one result file.

    Parameters
    ----------
    path : str
        File to parse once the solver has finished writing it.

    Attributes
    ----------
    data : Optional[np.ndarray]
        None before completion; the parsed matrix (possibly empty) afterwards.
    error : Optional[str]
        Failure message when parsing did not succeed.
    """

    def __init__(self, path: str):
        self.path = path
        self.data: Optional[np.ndarray] = None
        self.error: Optional[str] = None
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        """Run `run()` on a daemon thread and return it."""
        if self._thread is not None:
            return self._thread
        self._thread = threading.Thread(
            target=self.run,
            name="femexec-parse-{}".format(os.path.basename(self.path)),
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def run(self) -> None:
        if self._done.is_set():
            return
        data = None
        try:
            data = read_matrix(self.path)
            logger.debug("Parsed %s into %s matrix", self.path, data.shape)
        except OutputParseError as e:
            self.error = str(e)
            logger.error("Output file parsing failed: %s", e)
        finally:
            # Completion is published even if an unexpected error escapes
            if data is None:
                if self.error is None:
                    self.error = "Parsing of {} did not complete".format(self.path)
                data = np.empty((0, 0), dtype=np.float64)
            data.setflags(write=False)
            self.data = data
            self._done.set()

    def is_done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    @property
    def ok(self) -> bool:
        return self.is_done() and self.error is None
