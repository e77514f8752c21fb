# -*- coding: utf-8 -*-
# femexec/runner/errors.py

"""
Project: femexec
Date: 3/2/2026

Purpose
-------
Typed exceptions for the process layer. Launch problems are the only failures that
are raised to callers; everything observed while a solver runs is reported through
latched status flags instead.

Notes
-----
- `LaunchFailure` keeps the underlying OSError both as `__cause__` and in its context.
- Context rendering reuses the build layer helper (compact ' | k=v' suffix).
"""

from ..build.errors import _format_context

__all__ = [
    "ProcessError",
    "LaunchFailure",
    "ProcessNotStarted",
]


class ProcessError(Exception):
    """
    Base class for errors raised by process handles.

    Parameters
    ----------
    message : str
        Human-readable error.
    context : dict, optional
        Extra fields appended in the string form (e.g., {"cmd": [...], "cwd": "..."}).
    """
    def __init__(self, message, context=None):
        self.context = dict(context) if context else None
        super(ProcessError, self).__init__(message)

    def __str__(self):
        base = super(ProcessError, self).__str__()
        return base + _format_context(self.context)


class LaunchFailure(ProcessError):
    """
    The executable could not be spawned (missing binary, bad working directory,
    permission denied). No process object exists after this is raised.
    """

    @property
    def os_error(self):
        return self.__cause__


class ProcessNotStarted(ProcessError):
    """An operation needed a running process but `start()` never succeeded."""
