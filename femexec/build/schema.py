# -*- coding: utf-8 -*-
# femexec/build/schema.py

"""
Project: femexec
Date: 3/6/2026 (Updated: 3/9/2026)

Purpose
-------
Typed configuration objects consumed by the executors: supported FEM programs, model
dimensionality, displacement degrees of freedom, per-program parameters, per-substructure
settings and the top-level executor configuration.

Main Tasks
----------
    1. Enumerations with Java-style `valueOf` lookup by name (`parse_enum`).
    2. Dataclasses for program, substructure and executor configuration.
    3. `missing_fields()` so callers can validate records left incomplete by a lenient load.

Notes
-----
- Enum names are the persisted spelling (e.g., "TwoD", "OPENSEES", "DX").
- Nothing here interprets FEM semantics; values are carried through to the solver.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import SchemaError


class FemProgram(enum.Enum):
    OPENSEES = "OPENSEES"
    ABAQUS = "ABAQUS"
    ZEUS_NL = "ZEUS_NL"


class DimensionType(enum.Enum):
    TwoD = "TwoD"
    ThreeD = "ThreeD"


class DispDof(enum.Enum):
    DX = "DX"
    DY = "DY"
    DZ = "DZ"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"


def parse_enum(cls, text):
    """
    Look up an enum member by its exact name.

    Raises
    ------
    SchemaError
        If `text` is not a member name of `cls`.
    """
    try:
        return cls[str(text).strip()]
    except KeyError:
        raise SchemaError(
            "'{}' is not a valid {}".format(text, cls.__name__),
            {"allowed": [m.name for m in cls]},
        )


@dataclass
class FemProgramConfig:
    """Executable and static analysis script for one FEM program."""
    program: FemProgram
    executable_path: str
    static_script_path: Optional[str] = None


@dataclass
class FemConfig:
    """
    Settings of one substructure.

    Attributes
    ----------
    address : str
        Substructure name (e.g., "MDL-01").
    dimension : Optional[DimensionType]
    fem_program : Optional[FemProgram]
    model_file_name : Optional[str]
    node_sequence : Optional[List[int]]
        Control nodes in order.
    effective_dofs : Dict[int, List[DispDof]]
        Effective DOFs per control node.
    """
    address: str
    dimension: Optional[DimensionType] = None
    fem_program: Optional[FemProgram] = None
    model_file_name: Optional[str] = None
    node_sequence: Optional[List[int]] = None
    effective_dofs: Dict[int, List[DispDof]] = field(default_factory=dict)

    def add_effective_dofs(self, node: int, dofs: List[DispDof]) -> None:
        self.effective_dofs[int(node)] = list(dofs)

    def get_effective_dofs(self, node: int) -> Optional[List[DispDof]]:
        return self.effective_dofs.get(int(node))


@dataclass
class FemExecutorConfig:
    """Work directory, program registry and substructure configurations."""
    work_dir: Optional[str]
    fem_program_parameters: Dict[FemProgram, FemProgramConfig] = field(default_factory=dict)
    substruct_cfgs: Dict[str, FemConfig] = field(default_factory=dict)

    def program_for(self, name: str) -> FemProgramConfig:
        """
        Return the program parameters used by substructure `name`.

        Raises
        ------
        SchemaError
            If the substructure is unknown, has no program, or the program is not registered.
        """
        cfg = self.substruct_cfgs.get(name)
        if cfg is None:
            raise SchemaError("Unknown substructure", {"name": name})
        if cfg.fem_program is None:
            raise SchemaError("Substructure has no FEM program", {"name": name})
        prog = self.fem_program_parameters.get(cfg.fem_program)
        if prog is None:
            raise SchemaError("FEM program is not configured",
                              {"name": name, "program": cfg.fem_program.name})
        return prog


def missing_fields(cfg: FemConfig) -> List[str]:
    """
    List the fields a lenient load left empty (e.g., ["dimension", "effective.dofs.3"]).
    """
    gaps = []
    if cfg.dimension is None:
        gaps.append("dimension")
    if cfg.fem_program is None:
        gaps.append("fem.program")
    if not cfg.model_file_name:
        gaps.append("model.filename")
    if cfg.node_sequence is None:
        gaps.append("control.nodes")
    else:
        for node in cfg.node_sequence:
            if cfg.get_effective_dofs(node) is None:
                gaps.append("effective.dofs.{}".format(node))
    return gaps
