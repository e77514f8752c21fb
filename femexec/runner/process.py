# -*- coding: utf-8 -*-
# femexec/runner/process.py

"""
Project: femexec
Date: 3/2/2026 (Updated: 3/9/2026)

Purpose
-------
Own one external solver process: launch it with a fixed argument list inside a working
directory, expose its stdout/stderr as observable line producers, answer non-blocking
liveness queries, and terminate it on request. The stdin variant additionally drains a
bounded command queue into the process input from a dedicated writer thread.

Main Tasks
----------
    1. `ProcessHandle.start()` spawns `<executable> <args...>` (text mode, line-buffered)
       and raises `LaunchFailure` when the OS refuses to spawn it.
    2. `has_exited()` / `is_done()` poll the exit code without blocking.
    3. `abort()` terminates (then kills) the process and joins its stream readers;
       it never raises and is safe before start or after a natural exit.
    4. `StdinProcessHandle` writes queued `CommandMessage`s (payload + newline) in FIFO
       order until an EXIT sentinel is dequeued, then closes stdin.

Notes
-----
- Invocation convention: `<executable> <filename-or-program-label> [...]`, cwd set first.
- The writer waits on the queue with a bounded timeout (`wait_ms`) and also stops once the
  process is gone, so it can never stay blocked after `abort()`.
- EXIT does not kill the process; closing stdin lets the solver shut down by itself.
"""

import enum
import logging
import queue
import subprocess
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import LaunchFailure, ProcessError
from .streams import LineProducer

logger = logging.getLogger(__name__)

DEFAULT_WAIT_MS = 2000
TERMINATE_GRACE_S = 5.0
READER_JOIN_S = 1.0
# Lines retained per stream by interactive handles; monitors see every line regardless
DYNAMIC_MAX_LINES = 10000


class MessageKind(enum.Enum):
    COMMAND = "Command"
    EXIT = "Exit"


@dataclass(frozen=True)
class CommandMessage:
    kind: MessageKind
    payload: str = ""

    @classmethod
    def command(cls, text: str) -> "CommandMessage":
        return cls(MessageKind.COMMAND, str(text))

    @classmethod
    def exit(cls, text: str = "Exit") -> "CommandMessage":
        return cls(MessageKind.EXIT, str(text))


class ProcessHandle:
    """
    Wrapper around a single solver process without stdin interaction.

    Parameters
    ----------
    executable : str
        Executable name or path.
    args : Sequence[str], optional
        Command-line arguments (typically the model/script filename).
    workdir : str, optional
        Working directory for the process; None keeps the caller's cwd.
    wait_ms : int, optional
        Polling interval in milliseconds used for bounded waits (default: 2000).
    max_lines : int, optional
        Bound on the lines kept for `output` / `errors`; None keeps the whole run.

    Attributes
    ----------
    stdout, stderr : LineProducer
        Observable line producers; readers start once the process is launched.
    """

    def __init__(self, executable: str, args: Optional[Sequence[str]] = None,
                 workdir: Optional[str] = None, wait_ms: int = DEFAULT_WAIT_MS,
                 max_lines: Optional[int] = None):
        self.executable = str(executable)
        self.args: List[str] = [str(a) for a in (args or [])]
        self.workdir = workdir
        self.wait_ms = int(wait_ms)
        self.stdout = LineProducer("stdout", max_lines=max_lines)
        self.stderr = LineProducer("stderr", max_lines=max_lines)
        self._proc: Optional[subprocess.Popen] = None
        self._exited = False

    # --------------------
    # Configuration
    # --------------------
    @property
    def cmd(self) -> List[str]:
        return [self.executable] + list(self.args)

    def add_arg(self, arg: str) -> None:
        if self._proc is not None:
            raise ProcessError("Cannot add arguments after start", {"cmd": self.cmd})
        self.args.append(str(arg))

    def set_work_dir(self, workdir: Optional[str]) -> None:
        self.workdir = workdir

    def _popen_kwargs(self) -> dict:
        return dict(
            cwd=self.workdir,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            universal_newlines=True,
            bufsize=1,
        )

    # --------------------
    # Lifecycle
    # --------------------
    def start(self) -> subprocess.Popen:
        """
        Launch the process and start its stream readers.

        Returns
        -------
        subprocess.Popen
            The running process.

        Raises
        ------
        LaunchFailure
            If the executable cannot be spawned; the OSError is chained as `__cause__`.
        ProcessError
            If the handle was already started.
        """
        if self._proc is not None:
            raise ProcessError("Process already started", {"cmd": self.cmd, "pid": self._proc.pid})
        try:
            proc = subprocess.Popen(self.cmd, **self._popen_kwargs())
        except OSError as e:
            raise LaunchFailure(
                "Failed to start process: {}".format(e),
                {"cmd": self.cmd, "cwd": self.workdir},
            ) from e

        self._proc = proc
        self.stdout.attach(proc.stdout)
        self.stderr.attach(proc.stderr)
        self._on_started(proc)
        logger.debug("Started %s (pid=%s, cwd=%s)", self.cmd, proc.pid, self.workdir)
        return proc

    def _on_started(self, proc: subprocess.Popen) -> None:
        """Hook for variants that need extra threads once the process is running."""

    def _before_abort(self) -> None:
        """Hook run by `abort()` before the process is terminated."""

    def abort(self) -> None:
        """Forcibly terminate the process; no-op if it never started or already exited."""
        proc = self._proc
        if proc is None:
            return
        self._before_abort()
        try:
            if proc.poll() is None:
                proc.terminate()
                try:
                    proc.wait(timeout=TERMINATE_GRACE_S)
                except subprocess.TimeoutExpired:
                    logger.warning("Process %s did not terminate gracefully, forcing kill...", proc.pid)
                    proc.kill()
                    proc.wait()
        except OSError as e:
            logger.error("Error terminating process %s: %s", proc.pid, e)
        self._exited = True
        self._join_workers()
        logger.debug("Aborted %s (rc=%s)", self.cmd, proc.returncode)

    def _join_workers(self) -> None:
        self.stdout.join(READER_JOIN_S)
        self.stderr.join(READER_JOIN_S)

    # --------------------
    # Status
    # --------------------
    @property
    def started(self) -> bool:
        return self._proc is not None

    @property
    def pid(self) -> Optional[int]:
        return self._proc.pid if self._proc is not None else None

    @property
    def return_code(self) -> Optional[int]:
        if self._proc is None:
            return None
        return self._proc.poll()

    def is_alive(self) -> bool:
        if self._proc is None or self._exited:
            return False
        if self._proc.poll() is not None:
            self._exited = True
            return False
        return True

    def has_exited(self) -> bool:
        """Non-blocking exit check; a handle without a process reports exited."""
        return not self.is_alive()

    def is_done(self) -> bool:
        return self.has_exited()

    # --------------------
    # Collected output
    # --------------------
    @property
    def output(self) -> str:
        return self.stdout.text()

    @property
    def errors(self) -> str:
        return self.stderr.text()


class StdinProcessHandle(ProcessHandle):
    """
    Process handle that also feeds the process input from a bounded command queue.

    Parameters
    ----------
    queue_size : int, optional
        Maximum number of pending command messages (default: 64).
    max_lines : int, optional
        Bound on retained stream lines (default: DYNAMIC_MAX_LINES).

    Notes
    -----
    - One writer thread lives for the lifetime of the process.
    - Commands are written in submission order; EXIT is always the last message handled.
    """

    def __init__(self, executable: str, args: Optional[Sequence[str]] = None,
                 workdir: Optional[str] = None, wait_ms: int = DEFAULT_WAIT_MS,
                 queue_size: int = 64, max_lines: Optional[int] = DYNAMIC_MAX_LINES):
        super(StdinProcessHandle, self).__init__(executable, args, workdir, wait_ms, max_lines)
        self.stdin_q: "queue.Queue[CommandMessage]" = queue.Queue(maxsize=int(queue_size))
        self._writer: Optional[threading.Thread] = None

    def _popen_kwargs(self) -> dict:
        kwargs = super(StdinProcessHandle, self)._popen_kwargs()
        kwargs["stdin"] = subprocess.PIPE
        return kwargs

    def _on_started(self, proc: subprocess.Popen) -> None:
        self._writer = threading.Thread(
            target=self._write_loop,
            args=(proc,),
            name="femexec-stdin",
            daemon=True,
        )
        self._writer.start()

    def _write_loop(self, proc: subprocess.Popen) -> None:
        wait_s = max(self.wait_ms, 1) / 1000.0
        try:
            while True:
                try:
                    msg = self.stdin_q.get(timeout=wait_s)
                except queue.Empty:
                    if proc.poll() is not None:
                        logger.debug("Process %s exited; stdin writer stopping", proc.pid)
                        break
                    continue
                if msg.kind is MessageKind.EXIT:
                    logger.debug("Exit message received; stdin writer stopping")
                    break
                try:
                    proc.stdin.write(msg.payload + "\n")
                    proc.stdin.flush()
                except (OSError, ValueError) as e:
                    logger.warning("Unable to send %r to process %s: %s", msg.payload, proc.pid, e)
                    break
                logger.debug("Sent %r to process %s", msg.payload, proc.pid)
        finally:
            try:
                proc.stdin.close()
            except (OSError, ValueError) as e:
                logger.debug("Closing stdin of %s failed: %s", proc.pid, e)

    def send(self, text: str) -> None:
        """
        Queue one command line for the process.

        Raises
        ------
        ProcessError
            If the queue stays full for longer than the wait interval.
        """
        self._put(CommandMessage.command(text))

    def send_exit(self, text: str = "Exit") -> None:
        self._put(CommandMessage.exit(text))

    def _put(self, msg: CommandMessage) -> None:
        try:
            self.stdin_q.put(msg, timeout=max(self.wait_ms, 1) / 1000.0)
        except queue.Full:
            raise ProcessError("Command queue is full", {"payload": msg.payload, "size": self.stdin_q.maxsize})

    def _before_abort(self) -> None:
        try:
            self.stdin_q.put_nowait(CommandMessage.exit())
        except queue.Full:
            # The writer drains until its write fails or it sees the process gone.
            logger.debug("Command queue full while aborting; writer will stop on process exit")

    def _join_workers(self) -> None:
        super(StdinProcessHandle, self)._join_workers()
        if self._writer is not None:
            self._writer.join(max(self.wait_ms, 1) / 1000.0 + READER_JOIN_S)


def make_handle(executable: str, label: str, workdir: Optional[str] = None,
                wait_ms: int = DEFAULT_WAIT_MS, dynamic: bool = False) -> ProcessHandle:
    """Build the handle variant for static (`dynamic=False`) or interactive runs."""
    cls = StdinProcessHandle if dynamic else ProcessHandle
    return cls(executable, [label], workdir=workdir, wait_ms=wait_ms)
