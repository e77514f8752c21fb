# -*- coding: utf-8 -*-
# femexec/build/config.py

"""
Project: femexec
Date: 3/7/2026 (Updated: 3/10/2026)

Purpose
-------
Load and save the executor configuration as a flat properties file (key=value records),
mapping it to and from `FemExecutorConfig`. Loading is lenient: every missing or
unrecognized field is logged and skipped so the remaining fields and substructures are
still read; callers validate gaps with `schema.missing_fields()`.

Keys
----
    work.dir                         working directory
    substructures                    "name1, name2, ..."
    <PROGRAM>.executable             executable path per FEM program
    <PROGRAM>.static.script          static analysis script per FEM program
    <name>.dimension                 TwoD | ThreeD
    <name>.control.nodes             "2, 3, 4"
    <name>.fem.program               OPENSEES | ...
    <name>.model.filename            model file
    <name>.effective.dofs.<node>     "DX, RZ" for every control node

Main Tasks
----------
    1. `parse_properties` / `render_properties`: Java-properties style text with
       backslash escapes, line continuations and '#'/'!' comments.
    2. `load_config(path)` → FemExecutorConfig (or None if the file is unreadable).
    3. `save_config(cfg, path)`: sorted substructure names, deterministic key order,
       atomic UTF-8 write.
"""

import logging
import os
import stat
import tempfile
import time
from pathlib import Path
from typing import Dict, Mapping, Optional

from .codecs import decode_dofs, decode_ints, encode_list
from .errors import CodecError, RenderError, SchemaError
from .schema import (
    DimensionType,
    FemConfig,
    FemExecutorConfig,
    FemProgram,
    FemProgramConfig,
    parse_enum,
)

logger = logging.getLogger(__name__)

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


# ----------------------------
# Properties text
# ----------------------------
def _logical_lines(text: str):
    """Yield logical lines: comments dropped, backslash continuations joined."""
    buf = None
    for raw in text.splitlines():
        line = raw.lstrip()
        if buf is None and (not line or line[0] in "#!"):
            continue
        # Odd number of trailing backslashes means continuation
        n_bs = len(line) - len(line.rstrip("\\"))
        if n_bs % 2 == 1:
            buf = (buf or "") + line[:-1]
            continue
        yield (buf or "") + line
        buf = None
    if buf is not None:
        yield buf


def _unescape(s: str) -> str:
    out = []
    i = 0
    while i < len(s):
        c = s[i]
        if c == "\\" and i + 1 < len(s):
            nxt = s[i + 1]
            if nxt == "u" and len(s) >= i + 6:
                try:
                    out.append(chr(int(s[i + 2:i + 6], 16)))
                    i += 6
                    continue
                except ValueError:
                    pass
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(c)
        i += 1
    return "".join(out)


def _split_key_value(line: str):
    """Split at the first unescaped '=', ':' or whitespace."""
    i = 0
    while i < len(line):
        c = line[i]
        if c == "\\":
            i += 2
            continue
        if c in "=:" or c.isspace():
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse properties text into an ordered dict (later keys win)."""
    props = {}
    for line in _logical_lines(text):
        key, value = _split_key_value(line)
        props[key] = value
    return props


def _escape(s: str, is_key: bool) -> str:
    out = []
    for i, c in enumerate(s):
        if c == "\\":
            out.append("\\\\")
        elif c == "\t":
            out.append("\\t")
        elif c == "\n":
            out.append("\\n")
        elif c == "\r":
            out.append("\\r")
        elif c == "\f":
            out.append("\\f")
        elif c in "=:#!":
            out.append("\\" + c)
        elif c == " " and (is_key or i == 0):
            out.append("\\ ")
        else:
            out.append(c)
    return "".join(out)


def render_properties(props: Mapping[str, str], comment: Optional[str] = None) -> str:
    """
    Render key/value pairs as properties text, keys sorted, with a timestamp header.
    """
    lines = []
    if comment is not None:
        lines.append("#" + comment)
    lines.append("#" + time.strftime("%a %b %d %H:%M:%S %Z %Y"))
    for key in sorted(props.keys()):
        lines.append("{}={}".format(_escape(str(key), True), _escape(str(props[key]), False)))
    return "\n".join(lines) + "\n"


def _file_mode(p: Path) -> int:
    """Mode for the saved file: keep an existing file's mode, else 0666 minus umask."""
    if p.exists():
        return stat.S_IMODE(p.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomic(text: str, path: str) -> str:
    """Atomic UTF-8 write via a temp file in the target directory."""
    p = Path(path)
    if not p.parent.exists():
        p.parent.mkdir(parents=True)
    tf = tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=str(p.parent), delete=False)
    try:
        with tf:
            tf.write(text)
        os.chmod(tf.name, _file_mode(p))
        os.replace(tf.name, str(p))
    except BaseException:
        try:
            os.unlink(tf.name)
        except OSError as e:
            logger.debug("Could not remove temp file %s: %s", tf.name, e)
        raise
    return str(p)


# ----------------------------
# Load
# ----------------------------
def _load_program(props: Mapping[str, str], ptype: FemProgram) -> Optional[FemProgramConfig]:
    executable = props.get(ptype.name + ".executable")
    if executable is None:
        return None
    return FemProgramConfig(ptype, executable, props.get(ptype.name + ".static.script"))


def _load_enum(props, key, cls, what, name):
    text = props.get(key)
    if text is None:
        logger.error("%s not found for %s", what, name)
        return None
    try:
        return parse_enum(cls, text)
    except SchemaError:
        logger.error("%s \"%s\" not recognized for %s", what, text, name)
        return None


def _load_substructure(props: Mapping[str, str], name: str) -> FemConfig:
    dim = _load_enum(props, name + ".dimension", DimensionType, "Dimension", name)

    nodes = None
    text = props.get(name + ".control.nodes")
    if text is None:
        logger.error("Control nodes not found for %s", name)
    else:
        try:
            nodes = decode_ints(text)
        except CodecError as e:
            logger.error("Control node list \"%s\" not recognized for %s: %s", text, name, e)

    fem = _load_enum(props, name + ".fem.program", FemProgram, "FEM program name", name)
    model_file = props.get(name + ".model.filename")
    if model_file is None:
        logger.error("Model filename not found for %s", name)

    cfg = FemConfig(name, dim, fem, model_file, nodes)
    for node in nodes or []:
        text = props.get("{}.effective.dofs.{}".format(name, node))
        if text is None:
            logger.error("Missing Effective DOFs for node %s substructure %s", node, name)
            continue
        try:
            cfg.add_effective_dofs(node, decode_dofs(text))
        except CodecError as e:
            logger.error("Effective DOF list \"%s\" not recognized for node %s substructure %s: %s",
                         text, node, name, e)
    return cfg


def config_from_properties(props: Mapping[str, str]) -> FemExecutorConfig:
    """Map parsed properties onto a FemExecutorConfig (lenient, logs per field)."""
    work_dir = props.get("work.dir")
    if work_dir is None:
        logger.error("work.dir not found")
    cfg = FemExecutorConfig(work_dir)
    for ptype in FemProgram:
        prog = _load_program(props, ptype)
        if prog is not None:
            cfg.fem_program_parameters[ptype] = prog

    names = props.get("substructures")
    if names is None:
        logger.error("No substructures listed")
        return cfg
    for name in names.split(","):
        name = name.strip()
        if not name:
            continue
        cfg.substruct_cfgs[name] = _load_substructure(props, name)
    return cfg


def load_config(path: str) -> Optional[FemExecutorConfig]:
    """
    Load a configuration file.

    Returns
    -------
    Optional[FemExecutorConfig]
        The configuration (possibly with gaps), or None if the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Unable to read from \"%s\" because %s", path, e)
        return None
    return config_from_properties(parse_properties(text))


# ----------------------------
# Save
# ----------------------------
def _save_substructure(props: Dict[str, str], cfg: FemConfig) -> None:
    name = cfg.address
    if cfg.dimension is not None:
        props[name + ".dimension"] = cfg.dimension.name
    else:
        logger.error("Substructure %s has no dimension", name)
    nodes = cfg.node_sequence or []
    props[name + ".control.nodes"] = encode_list(nodes)
    for node in nodes:
        dofs = cfg.get_effective_dofs(node)
        if dofs is None:
            logger.error("Node %s from %s has no effective DOFs", node, name)
            continue
        props["{}.effective.dofs.{}".format(name, node)] = encode_list(dofs)
    if cfg.fem_program is not None:
        props[name + ".fem.program"] = cfg.fem_program.name
    else:
        logger.error("Substructure %s has no FEM program", name)
    if cfg.model_file_name is not None:
        props[name + ".model.filename"] = cfg.model_file_name


def config_to_properties(cfg: FemExecutorConfig) -> Dict[str, str]:
    props: Dict[str, str] = {}
    names = sorted(cfg.substruct_cfgs.keys())
    for name in names:
        sub = cfg.substruct_cfgs[name]
        if sub.address != name:
            sub = FemConfig(name, sub.dimension, sub.fem_program, sub.model_file_name,
                            sub.node_sequence, sub.effective_dofs)
        _save_substructure(props, sub)
    if cfg.work_dir is not None:
        props["work.dir"] = cfg.work_dir
    props["substructures"] = encode_list(names)
    for prog in cfg.fem_program_parameters.values():
        props[prog.program.name + ".executable"] = prog.executable_path
        if prog.static_script_path is not None:
            props[prog.program.name + ".static.script"] = prog.static_script_path
    return props


def save_config(cfg: FemExecutorConfig, path: str) -> str:
    """
    Write `cfg` to `path` (atomic).

    Raises
    ------
    RenderError
        If the file cannot be written.
    """
    text = render_properties(config_to_properties(cfg), comment="")
    try:
        return _write_atomic(text, path)
    except OSError as e:
        raise RenderError("Unable to write configuration: {}".format(e), {"path": path}) from e
