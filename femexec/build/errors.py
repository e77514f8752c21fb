# -*- coding: utf-8 -*-
# femexec/build/errors.py

"""
Project: femexec
Date: 3/6/2026

Purpose
-------
Typed exceptions for the configuration layer with compact, context-aware messages,
shared by the list codecs, the configuration objects and the properties load/save.

Main Tasks
----------
    1. Define ConfigError(message, context) with a compact context suffix in __str__.
    2. Provide typed subclasses: SchemaError, CodecError, RenderError.

Notes
-----
- Context is optional; long values are truncated for readability.
- Loading is lenient and logs these errors per field instead of raising them.
"""

__all__ = [
    "ConfigError",
    "SchemaError",
    "CodecError",
    "RenderError",
]


def _format_context(ctx):
    """Return a compact ' | key1=val1, key2=val2' string or '' if no context."""
    if not ctx:
        return ""
    parts = []
    for k in sorted(ctx.keys()):
        sv = repr(ctx[k])
        if len(sv) > 120:
            sv = sv[:117] + "..."
        parts.append("{}={}".format(k, sv))
    return " | " + ", ".join(parts)


class ConfigError(Exception):
    """
    Base class for all configuration-related errors.

    Parameters
    ----------
    message : str
        Human-readable error.
    context : dict, optional
        Extra fields to append in the string form (e.g., {"key": "MDL-01.dimension"}).
    """
    def __init__(self, message, context=None):
        self.context = dict(context) if context else None
        super(ConfigError, self).__init__(message)

    def __str__(self):
        base = super(ConfigError, self).__str__()
        return base + _format_context(self.context)


class SchemaError(ConfigError):
    """
    A value does not map onto the typed configuration:
      - unknown dimension / program / DOF names
      - missing required fields on a substructure
    """


class CodecError(ConfigError):
    """An encoded list field contains a token that cannot be decoded."""


class RenderError(ConfigError):
    """
    Errors while rendering/writing the configuration file:
      - unencodable values
      - IO problems (context carries 'path')
    """
