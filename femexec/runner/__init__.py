# -*- coding: utf-8 -*-
# femexec/runner/__init__.py

"""
Project: femexec
Date: 3/2/2026 (Updated: 3/10/2026)

Modules
-------
- process:   Process handles (plain / stdin-fed) with launch, liveness, abort, and
             a FIFO command queue drained by a writer thread until an EXIT message.

- streams:   Observable line producers; one reader thread per stdout/stderr pipe.

- monitor:   Response monitors that queue recognized lines for the poller, plus
             recognition rules and small stream helpers (tail, failure bursts).

- execution: Coordinator binding a handle to stdout/stderr monitors and latching
             died / errored / step-executed flags on every poll.

- static:    Forward-only state machine for one-shot runs with optional background
             parsing of the displacement and force result files.

- errors:    LaunchFailure and the other process-layer exceptions.
"""

from .errors import ProcessError, LaunchFailure, ProcessNotStarted
from .process import (
    MessageKind,
    CommandMessage,
    ProcessHandle,
    StdinProcessHandle,
    make_handle,
)
from .streams import LineProducer
from .monitor import ResponseMonitor, any_line, non_empty, contains, tail_lines, early_stop
from .execution import ExecutionStatus, ProcessExecution
from .static import ExecutionState, StaticExecutor, DISP_FILE, FORCE_FILE

__all__ = [
    "ProcessError", "LaunchFailure", "ProcessNotStarted",
    "MessageKind", "CommandMessage", "ProcessHandle", "StdinProcessHandle", "make_handle",
    "LineProducer",
    "ResponseMonitor", "any_line", "non_empty", "contains", "tail_lines", "early_stop",
    "ExecutionStatus", "ProcessExecution",
    "ExecutionState", "StaticExecutor", "DISP_FILE", "FORCE_FILE",
]
