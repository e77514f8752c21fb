# -*- coding: utf-8 -*-
# femexec/runner/static.py

"""
Project: femexec
Date: 3/5/2026 (Updated: 3/10/2026)

Purpose
-------
Poll-driven execution of a one-shot (static) FEM analysis. The caller invokes
`is_done()` repeatedly from its own loop; each call advances an explicit state
machine as far as it can without blocking, and, once the solver exits, optionally
parses the displacement and force result files in the background.

States
------
    NOT_STARTED → EXECUTING → EXECUTION_FINISHED → [PROCESSING_OUTPUT_FILES] → FINISHED

Notes
-----
- States only move forward; FINISHED is terminal and `is_done()` stays True.
- A launch failure leaves the state at NOT_STARTED and `start_cmd()` returns None;
  later polls never report completion, so callers must check the start result.
- Result files are fixed names under the working directory.
"""

import enum
import logging
import os
import time
from typing import Optional

from .errors import LaunchFailure
from .process import DEFAULT_WAIT_MS, ProcessHandle
from ..interface.outputs import OutputFileParser

logger = logging.getLogger(__name__)

DISP_FILE = "tmp_disp.out"
FORCE_FILE = "tmp_forc.out"


class ExecutionState(enum.Enum):
    NOT_STARTED = "NotStarted"
    EXECUTING = "Executing"
    EXECUTION_FINISHED = "ExecutionFinished"
    PROCESSING_OUTPUT_FILES = "ProcessingOutputFiles"
    FINISHED = "Finished"


class StaticExecutor:
    """
    Run a command with a single filename argument and track its completion.

    Parameters
    ----------
    command : str
        Executable to run.
    filename : str
        First (and only) command-line argument.
    workdir : str, optional
        Working directory; None uses the current directory.
    wait_ms : int, optional
        Suggested polling interval for callers, in milliseconds (default: 2000).
    process_output_files : bool, optional
        Parse the displacement/force files once the process has exited.
    """

    def __init__(self, command: str, filename: str, workdir: Optional[str] = None,
                 wait_ms: int = DEFAULT_WAIT_MS, process_output_files: bool = False):
        self.command = command
        self.filename = filename
        self.workdir = workdir
        self.wait_ms = int(wait_ms)
        self.process_output_files = bool(process_output_files)
        self.current = ExecutionState.NOT_STARTED
        self.pm: Optional[ProcessHandle] = None
        base = workdir or os.curdir
        self.disp_parser = OutputFileParser(os.path.join(base, DISP_FILE))
        self.force_parser = OutputFileParser(os.path.join(base, FORCE_FILE))

    def start_cmd(self) -> Optional[ProcessHandle]:
        """
        Create the process handle and launch it.

        Returns
        -------
        Optional[ProcessHandle]
            The running handle, or None if the executable could not be spawned.
        """
        if self.current is not ExecutionState.NOT_STARTED:
            logger.warning("%s already started (state %s)", self.command, self.current.value)
            return self.pm
        pm = ProcessHandle(self.command, [self.filename], workdir=self.workdir, wait_ms=self.wait_ms)
        try:
            pm.start()
        except LaunchFailure as e:
            logger.error("%s failed to start: %s", self.command, e)
            return None
        self.pm = pm
        self.current = ExecutionState.EXECUTING
        return pm

    def is_done(self) -> bool:
        """
        Advance the state machine without blocking.

        Returns
        -------
        bool
            True only once the state is FINISHED.
        """
        if self.current is ExecutionState.EXECUTING and self.pm.is_done():
            self.current = ExecutionState.EXECUTION_FINISHED

        if self.current is ExecutionState.EXECUTION_FINISHED:
            if self.process_output_files:
                logger.debug("Starting parsing threads")
                self.disp_parser.start()
                self.force_parser.start()
                self.current = ExecutionState.PROCESSING_OUTPUT_FILES
            else:
                self.current = ExecutionState.FINISHED

        if self.current is ExecutionState.PROCESSING_OUTPUT_FILES:
            if self.disp_parser.is_done() and self.force_parser.is_done():
                self.current = ExecutionState.FINISHED

        logger.debug("Current state is %s", self.current.value)
        return self.current is ExecutionState.FINISHED

    def wait(self, poll_s: Optional[float] = None, timeout_s: Optional[float] = None) -> bool:
        """
        Convenience loop: call `is_done()` every `poll_s` seconds until finished or timed out.
        """
        poll = self.wait_ms / 1000.0 if poll_s is None else float(poll_s)
        start = time.time()
        while not self.is_done():
            if self.current is ExecutionState.NOT_STARTED:
                return False
            if timeout_s is not None and (time.time() - start) > float(timeout_s):
                return False
            time.sleep(poll)
        return True

    def abort(self) -> None:
        if self.pm is not None:
            self.pm.abort()

    @property
    def displacements(self):
        return self.disp_parser.data

    @property
    def forces(self):
        return self.force_parser.data
