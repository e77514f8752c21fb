# -*- coding: utf-8 -*-
# femexec/runner/monitor.py

"""
Project: femexec
Date: 3/2/2026 (Updated: 3/6/2026)

Purpose
-------
Recognize interesting solver output lines and hand them to the polling thread.
A `ResponseMonitor` observes one line producer, keeps the lines accepted by its
recognition rule on an unbounded FIFO queue, and lets the caller take them one by
one with a bounded wait.

Main Tasks
----------
    1. Provide recognition rules: any line (step completion on stdout), any
       non-empty line (errors on stderr), and case-insensitive token matching.
    2. Queue recognized lines verbatim, in stream order.
    3. Keep small stream helpers for summaries: last-N tail and a burst detector
       for failure patterns.

Notes
-----
- The extraction queue has one producer (the stream reader) and one consumer
  (the poller); `queue.Queue` is the only synchronization needed.
- No transformation beyond recognition: callers parse step numbers themselves.
"""

import queue
from collections import deque
from typing import Callable, Iterable, Optional, Tuple

Recognizer = Callable[[str], bool]


# ----------------------------
# Recognition rules
# ----------------------------
def any_line(line: str) -> bool:
    return True


def non_empty(line: str) -> bool:
    return bool(line.strip())


def contains(token: str) -> Recognizer:
    """Return a rule accepting lines that contain `token` (case-insensitive)."""
    needle = token.lower()

    def _rule(line: str) -> bool:
        return needle in line.lower()

    return _rule


class ResponseMonitor:
    """
    Observer that extracts recognized lines from a stream.

    Parameters
    ----------
    recognize : Callable[[str], bool], optional
        Predicate deciding which lines are forwarded (default: every line).
    name : str, optional
        Label for diagnostics.

    Attributes
    ----------
    extracted : queue.Queue
        FIFO of recognized lines, oldest first.
    """

    def __init__(self, recognize: Optional[Recognizer] = None, name: str = "monitor"):
        self.recognize = recognize or any_line
        self.name = name
        self.extracted: "queue.Queue[str]" = queue.Queue()

    def __call__(self, line: str) -> None:
        if self.recognize(line):
            self.extracted.put(line)

    def poll(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Return the oldest unread recognized line, or None.

        Args
        ----
        timeout : float, optional
            Seconds to wait for a line. None or 0 returns immediately.
        """
        try:
            if not timeout:
                return self.extracted.get_nowait()
            return self.extracted.get(timeout=float(timeout))
        except queue.Empty:
            return None

    def pending(self) -> int:
        return self.extracted.qsize()

    def __repr__(self) -> str:
        return "ResponseMonitor(name={!r}, pending={})".format(self.name, self.pending())


# ----------------------------
# Stream helpers
# ----------------------------
def tail_lines(iter_lines: Iterable[str], n_tail: int = 25) -> str:
    """
    Return the last `n_tail` lines from a line iterator, joined by '\\n'.
    """
    dq = deque(maxlen=int(n_tail))
    for line in iter_lines:
        dq.append(line.rstrip("\n"))
    return "\n".join(dq)


def early_stop(iter_lines: Iterable[str],
               patterns: Tuple[str, ...] = ("nan", "failed to converge"),
               max_bad: int = 3) -> bool:
    """
    Detect repeated failure patterns in a stream of lines.

    Performs a case-insensitive substring search for each pattern and returns True
    once `max_bad` matching lines have been seen. Useful as a caller-side watchdog
    over the error lines drained from a monitor.
    """
    pats = [p.lower() for p in patterns]
    bad = 0
    for line in iter_lines:
        s = line.lower()
        if any(p in s for p in pats):
            bad += 1
            if bad >= int(max_bad):
                return True
    return False
