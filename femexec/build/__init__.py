# -*- coding: utf-8 -*-
# femexec/build/__init__.py

"""
Project: femexec
Date: 3/6/2026

Modules:
--------
- schema:  Typed configuration (FemProgram, DimensionType, DispDof, program/substructure/
           executor dataclasses) and gap detection for leniently loaded records.

- codecs:  ', '-separated list encoding and decoding for node and DOF lists.

- config:  Properties-file load/save of the executor configuration.
           Order of ops on load: parse text -> programs -> substructures (per-field logging).

- errors:  Unified exceptions for the configuration layer.
           Provides ConfigError base plus SchemaError, CodecError, RenderError.
"""

from .schema import (
    FemProgram,
    DimensionType,
    DispDof,
    FemProgramConfig,
    FemConfig,
    FemExecutorConfig,
    parse_enum,
    missing_fields,
)
from .codecs import encode_list, decode_list, decode_ints, decode_dofs
from .config import (
    parse_properties,
    render_properties,
    config_from_properties,
    config_to_properties,
    load_config,
    save_config,
)
from .errors import ConfigError, SchemaError, CodecError, RenderError

__all__ = [
    # Typed configuration
    "FemProgram", "DimensionType", "DispDof",
    "FemProgramConfig", "FemConfig", "FemExecutorConfig",
    "parse_enum", "missing_fields",
    # List codecs
    "encode_list", "decode_list", "decode_ints", "decode_dofs",
    # Load / save
    "parse_properties", "render_properties", "config_from_properties",
    "config_to_properties", "load_config", "save_config",
    # Error types
    "ConfigError", "SchemaError", "CodecError", "RenderError",
]
