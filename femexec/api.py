# -*- coding: utf-8 -*-
# femexec/api.py

"""
Project: femexec
Date: 3/9/2026 (Updated: 3/11/2026)

Purpose
-------
High-level helpers wiring a loaded executor configuration to the process layer: build a
dynamic or static execution for a named substructure, drive the one-step-at-a-time
command protocol, and write quick-look plots of static results.

Main Tasks
----------
    1. Resolve a substructure's program parameters and working directory.
    2. `create_execution`: ProcessExecution (dynamic or static handle) for a substructure.
    3. `create_static_executor`: StaticExecutor running the program's static script.
    4. `run_dynamic_steps`: send commands one by one, each awaited with bounded polls.
    5. `post_static`: save displacement/force quick-looks next to the results.

Notes
-----
- Nothing here retries or kills a stalled solver; `run_dynamic_steps` reports a missing
  response as None and leaves the watchdog decision to the caller.
- Substructure working directories are `<work.dir>/<name>` and are created on demand.
"""

import logging
import os
from typing import Iterable, List, Optional

from .build.errors import SchemaError
from .build.schema import FemExecutorConfig, FemProgramConfig
from .runner.execution import ProcessExecution
from .runner.process import DEFAULT_WAIT_MS
from .runner.static import StaticExecutor

logger = logging.getLogger(__name__)


def program_for(config: FemExecutorConfig, name: str) -> FemProgramConfig:
    """Program parameters for substructure `name` (raises SchemaError if unresolved)."""
    return config.program_for(name)


def substructure_workdir(config: FemExecutorConfig, name: str, create: bool = True) -> str:
    """
    Return `<work.dir>/<name>`, creating it if requested.
    """
    base = config.work_dir or os.curdir
    path = os.path.join(base, name)
    if create:
        os.makedirs(path, exist_ok=True)
    return path


def create_execution(config: FemExecutorConfig, name: str, dynamic: bool = True,
                     wait_ms: int = 200, label: Optional[str] = None) -> ProcessExecution:
    """
    Build (but do not start) the ProcessExecution for substructure `name`.

    Args
    ----
    config : FemExecutorConfig
        Loaded executor configuration.
    name : str
        Substructure name.
    dynamic : bool, optional
        Step-by-step execution through stdin (default: True).
    wait_ms : int, optional
        Bounded wait used by the stdin writer (default: 200).
    label : str, optional
        First argument for the solver; defaults to the program name.
    """
    program = program_for(config, name)
    workdir = substructure_workdir(config, name)
    return ProcessExecution(program, workdir, wait_ms=wait_ms, dynamic=dynamic, label=label)


def create_static_executor(config: FemExecutorConfig, name: str,
                           process_output_files: bool = True,
                           wait_ms: int = DEFAULT_WAIT_MS) -> StaticExecutor:
    """
    Build a StaticExecutor running the program's static analysis script (or, without
    one, the substructure's model file) inside the substructure working directory.
    """
    program = program_for(config, name)
    filename = program.static_script_path or config.substruct_cfgs[name].model_file_name
    if not filename:
        raise SchemaError("No static script or model file to run", {"name": name})
    return StaticExecutor(
        program.executable_path,
        filename,
        workdir=substructure_workdir(config, name),
        wait_ms=wait_ms,
        process_output_files=process_output_files,
    )


def run_dynamic_steps(execution: ProcessExecution, commands: Iterable[str],
                      polls: int = 6, poll_s: float = 1.0) -> List[Optional[str]]:
    """
    Send each command and wait (bounded) for its completion line.

    For every command: reset the step latch, queue the command, then poll stdout up to
    `polls` times with `poll_s` seconds each, checking stderr and liveness in between.

    Returns
    -------
    List[Optional[str]]
        Raw completion line per command; None where no response arrived. Stops early
        (without sending further commands) once the process has died.
    """
    statuses = execution.statuses
    responses: List[Optional[str]] = []
    for command in commands:
        if statuses.process_died:
            logger.error("Process died; not sending %r", command)
            break
        statuses.reset_step()
        execution.send_step(command)
        for _ in range(int(polls)):
            execution.check_step_completion(timeout=poll_s)
            execution.check_for_errors()
            if statuses.step_executed:
                break
            execution.check_if_process_is_alive()
            if statuses.process_died:
                # Drain a completion line that raced the exit
                execution.check_step_completion()
                break
        if statuses.step_executed:
            logger.debug("Step %r completed: %r", command, statuses.last_step)
            responses.append(statuses.last_step)
        else:
            logger.warning("No response to %r after %d polls", command, polls)
            responses.append(None)
            if statuses.process_died:
                break
    return responses


def post_static(executor: StaticExecutor, out_dir: Optional[str] = None) -> List[str]:
    """
    Save quick-look plots of a finished static run (best-effort).

    Returns
    -------
    List[str]
        Paths of the written PNG files.
    """
    import matplotlib.pyplot as plt

    from .ops.results import plot_matrix, plot_hysteresis

    out_dir = out_dir or executor.workdir or os.curdir
    written = []
    jobs = (
        ("displacements.png", lambda: plot_matrix(executor.displacements, "Displacements", "Displacement")),
        ("forces.png", lambda: plot_matrix(executor.forces, "Forces", "Force")),
        ("hysteresis.png", lambda: plot_hysteresis(executor.displacements, executor.forces)),
    )
    for filename, job in jobs:
        fig = None
        try:
            fig, _ = job()
            path = os.path.join(out_dir, filename)
            fig.savefig(path)
            written.append(path)
        except (ValueError, OSError) as e:
            logger.warning("Skipping %s: %s", filename, e)
        finally:
            if fig is not None:
                plt.close(fig)
    return written
