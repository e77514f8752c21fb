# -*- coding: utf-8 -*-
# femexec/runner/streams.py

"""
Project: femexec
Date: 3/2/2026

Purpose
-------
Observable line producers for solver output pipes. Each producer owns one reader
thread that consumes a text stream line-by-line and hands every line (newline
stripped) to its observers, while keeping a copy (optionally bounded) and a short tail for
post-mortem summaries.

Main Tasks
----------
    1. Start a daemon reader thread on an open, readable text stream.
    2. Notify observers in stream order; the first observer attached is replayed
       the retained lines, so no line is lost to a start-up race.
    3. Close the stream at EOF and expose `closed` / `join()` for shutdown.

Notes
-----
- Observers run on the reader thread and must be quick (queue puts, appends).
- An observer raising is logged and skipped; the stream keeps being consumed.
- Only the first observer gets a replay; later ones see new lines only.
"""

import logging
import threading
from collections import deque
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

LineObserver = Callable[[str], None]


class LineProducer:
    """
    Publishes the lines of one process stream to registered observers.

    Parameters
    ----------
    name : str
        Label used in thread names and log messages (e.g., "stdout").
    tail_n : int, optional
        Number of trailing lines retained for `tail()` (default: 200).
    max_lines : int, optional
        Upper bound on the lines kept for `lines()` / `text()`; None keeps all.
    """

    def __init__(self, name: str, tail_n: int = 200, max_lines: Optional[int] = None):
        self.name = name
        self._lock = threading.Lock()
        self._observers: List[LineObserver] = []
        self._lines = deque(maxlen=None if max_lines is None else int(max_lines))
        self._replay = True
        self._tail = deque(maxlen=int(tail_n))
        self._thread: Optional[threading.Thread] = None
        self._closed = threading.Event()

    # --------------------
    # Observers
    # --------------------
    def add_observer(self, observer: LineObserver) -> None:
        """Register `observer`; the first one is replayed the lines emitted so far."""
        with self._lock:
            if self._replay:
                for line in self._lines:
                    self._notify(observer, line)
                self._replay = False
            self._observers.append(observer)

    def remove_observer(self, observer: LineObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _notify(self, observer: LineObserver, line: str) -> None:
        try:
            observer(line)
        except Exception as e:
            logger.warning("%s observer %r failed on %r: %s", self.name, observer, line, e)

    def _emit(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)
            self._tail.append(line)
            for observer in list(self._observers):
                self._notify(observer, line)

    # --------------------
    # Reader thread
    # --------------------
    def attach(self, stream) -> threading.Thread:
        """
        Start consuming `stream` on a daemon thread.

        Args
        ----
        stream : TextIO
            Readable text stream (e.g., `Popen.stdout`) yielding '' at EOF.

        Returns
        -------
        threading.Thread
            The started reader thread.
        """
        if self._thread is not None:
            raise RuntimeError("{} producer is already attached".format(self.name))
        self._thread = threading.Thread(
            target=self._read_loop,
            args=(stream,),
            name="femexec-{}".format(self.name),
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def _read_loop(self, stream) -> None:
        try:
            for line in iter(stream.readline, ""):
                if not line:
                    break
                self._emit(line.rstrip("\r\n"))
        except (OSError, ValueError) as e:
            # Pipe torn down underneath us (abort); liveness checks report the death.
            logger.debug("%s reader stopped: %s", self.name, e)
        finally:
            try:
                stream.close()
            except OSError as e:
                logger.debug("Closing %s failed: %s", self.name, e)
            self._closed.set()
            logger.debug("%s stream closed after %d lines", self.name, len(self._lines))

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the reader thread to finish; return True if the stream is closed."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self._closed.is_set()

    # --------------------
    # Snapshots
    # --------------------
    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def text(self) -> str:
        return "\n".join(self.lines())

    def tail(self, n: Optional[int] = None) -> str:
        with self._lock:
            tail = list(self._tail)
        if n is not None:
            tail = tail[-int(n):] if n > 0 else []
        return "\n".join(tail)
