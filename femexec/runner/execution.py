# -*- coding: utf-8 -*-
# femexec/runner/execution.py

"""
Project: femexec
Date: 3/3/2026 (Updated: 3/9/2026)

Purpose
-------
Coordinate one running FEM program instance: bind a process handle to a stdout
monitor (step completion) and a stderr monitor (errors), and translate what they
extract into an `ExecutionStatus` that a real-time control loop can poll without
ever blocking for long.

Main Tasks
----------
    1. `start()`: launch the handle; attach both monitors only on success.
    2. Idempotent checks: `check_if_process_is_alive`, `check_step_completion`,
       `check_for_errors`, each a no-op once its own flag is latched.
    3. `send_step()` for dynamic runs and `abort()` for every exit path.

Notes
-----
- Status fields are written only by the polling thread after a queue dequeue.
- One outstanding step at a time is the caller's contract: send a step, poll until
  `step_executed`, call `statuses.reset_step()`, then send the next one.
- Errors on stderr are observational; nothing here kills or restarts the solver.
"""

import logging
from typing import Optional

from .errors import LaunchFailure, ProcessNotStarted
from .monitor import ResponseMonitor, any_line, non_empty
from .process import DEFAULT_WAIT_MS, ProcessHandle, StdinProcessHandle, make_handle

logger = logging.getLogger(__name__)


class ExecutionStatus:
    """
    Latched status of one substructure execution.

    Attributes
    ----------
    process_died : bool
        Latched once the process is seen to have exited.
    process_errored : bool
        Latched once any line was recognized on stderr.
    step_executed : bool
        Latched once a completion line arrived for the current step; cleared only
        by `reset_step()`.
    last_step : Optional[str]
        Raw text of the most recently recognized completion line.
    """

    def __init__(self):
        self._died = False
        self._errored = False
        self._step = False
        self.last_step: Optional[str] = None

    @property
    def process_died(self) -> bool:
        return self._died

    @process_died.setter
    def process_died(self, value: bool) -> None:
        self._died = self._died or bool(value)

    @property
    def process_errored(self) -> bool:
        return self._errored

    @process_errored.setter
    def process_errored(self, value: bool) -> None:
        self._errored = self._errored or bool(value)

    @property
    def step_executed(self) -> bool:
        return self._step

    @step_executed.setter
    def step_executed(self, value: bool) -> None:
        self._step = self._step or bool(value)

    def reset_step(self) -> None:
        """Clear `step_executed` before requesting the next step."""
        self._step = False

    def __repr__(self) -> str:
        return ("ExecutionStatus(died={}, errored={}, step_executed={}, last_step={!r})"
                .format(self._died, self._errored, self._step, self.last_step))


class ProcessExecution:
    """
    Manage and monitor one FEM program process.

    Parameters
    ----------
    program : FemProgramConfig
        Program parameters; `executable_path` is launched.
    workdir : str
        Directory to run the process in.
    wait_ms : int, optional
        Interval used for bounded waits inside the handle (default: 2000).
    dynamic : bool, optional
        If True, use a stdin-capable handle for step-by-step execution.
    label : str, optional
        First command-line argument; defaults to the program name (e.g., "OPENSEES").
    """

    def __init__(self, program, workdir: Optional[str], wait_ms: int = DEFAULT_WAIT_MS,
                 dynamic: bool = False, label: Optional[str] = None):
        self.program = program
        self.dynamic = bool(dynamic)
        if label is None:
            label = program.program.value
        self.statuses = ExecutionStatus()
        self.process: ProcessHandle = make_handle(
            program.executable_path, label, workdir=workdir, wait_ms=wait_ms, dynamic=self.dynamic
        )
        self.response_monitor: Optional[ResponseMonitor] = None
        self.error_monitor: Optional[ResponseMonitor] = None

    def start(self) -> bool:
        """
        Launch the process and attach the stdout/stderr monitors.

        Returns
        -------
        bool
            False if the executable could not be spawned; the instance is then
            unusable and no monitors exist.
        """
        try:
            self.process.start()
        except LaunchFailure as e:
            logger.error("%s failed to start: %s", " ".join(self.process.cmd), e)
            return False
        self.response_monitor = ResponseMonitor(any_line, name="stdout")
        self.process.stdout.add_observer(self.response_monitor)
        self.error_monitor = ResponseMonitor(non_empty, name="stderr")
        self.process.stderr.add_observer(self.error_monitor)
        return True

    @property
    def started(self) -> bool:
        return self.response_monitor is not None

    def abort(self) -> None:
        self.process.abort()

    # --------------------
    # Polling checks
    # --------------------
    def check_if_process_is_alive(self, statuses: Optional[ExecutionStatus] = None) -> None:
        """Latch `process_died` once the handle reports an exit."""
        statuses = statuses or self.statuses
        if statuses.process_died or not self.started:
            return
        if self.process.has_exited():
            statuses.process_died = True
            logger.debug("Process %s has exited (rc=%s)", self.process.pid, self.process.return_code)

    def check_step_completion(self, statuses: Optional[ExecutionStatus] = None,
                              timeout: Optional[float] = None) -> None:
        """Latch `step_executed` and record `last_step` when stdout produced a line."""
        statuses = statuses or self.statuses
        if statuses.step_executed or self.response_monitor is None:
            return
        step = self.response_monitor.poll(timeout)
        if step is None:
            return
        statuses.step_executed = True
        statuses.last_step = step

    def check_for_errors(self, statuses: Optional[ExecutionStatus] = None,
                         timeout: Optional[float] = None) -> None:
        """Latch `process_errored` and log the line when stderr produced one."""
        statuses = statuses or self.statuses
        if statuses.process_errored or self.error_monitor is None:
            return
        error = self.error_monitor.poll(timeout)
        if error is not None:
            statuses.process_errored = True
            logger.error(error)

    # --------------------
    # Dynamic mode
    # --------------------
    def send_step(self, command: str) -> None:
        """
        Queue one step command for the solver (dynamic mode only).

        Raises
        ------
        ProcessNotStarted
            If the execution is static or was never started.
        """
        if not self.dynamic or not isinstance(self.process, StdinProcessHandle):
            raise ProcessNotStarted("Step commands need a dynamic execution", {"cmd": self.process.cmd})
        if not self.started:
            raise ProcessNotStarted("Process has not been started", {"cmd": self.process.cmd})
        self.process.send(command)

    def send_exit(self) -> None:
        if isinstance(self.process, StdinProcessHandle):
            self.process.send_exit()
