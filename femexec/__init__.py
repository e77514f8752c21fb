# -*- coding: utf-8 -*-
# femexec/__init__.py

"""
Project: femexec
Date: 3/2/2026 (Updated: 3/11/2026)

Drive external finite-element solvers (e.g., OpenSees) as substructures of a hybrid
simulation: one-shot static runs with result-file parsing, and interactive dynamic runs
fed one step command at a time and polled without blocking.

Packages
--------
- runner:    process handles, stream monitors, execution coordinator, static state machine.
- interface: result-file parsing into NumPy matrices.
- build:     typed configuration objects and properties-file load/save.
- ops:       Matplotlib quick-looks of result matrices.
- api:       configuration-to-execution helpers.
"""

from .runner import (
    LaunchFailure,
    ProcessHandle,
    StdinProcessHandle,
    ResponseMonitor,
    ExecutionStatus,
    ProcessExecution,
    ExecutionState,
    StaticExecutor,
)
from .interface import OutputFileParser, read_matrix
from .build import FemExecutorConfig, load_config, save_config

__version__ = "0.3.0"

__all__ = [
    "LaunchFailure", "ProcessHandle", "StdinProcessHandle", "ResponseMonitor",
    "ExecutionStatus", "ProcessExecution", "ExecutionState", "StaticExecutor",
    "OutputFileParser", "read_matrix",
    "FemExecutorConfig", "load_config", "save_config",
]
