# -*- coding: utf-8 -*-
# femexec/build/codecs.py

"""
Project: femexec
Date: 3/6/2026

Purpose
-------
Encode and decode list-valued configuration fields ("2, 3, 4" / "DX, RZ").

Notes
-----
- Encoding joins with ', ' (the same separator as the substructure name list).
- Decoding splits on ',' and tolerates surrounding whitespace and empty input.
"""

from typing import Callable, Iterable, List, TypeVar

from .errors import CodecError, SchemaError
from .schema import DispDof, parse_enum

T = TypeVar("T")

SEPARATOR = ", "


def _token(item) -> str:
    name = getattr(item, "name", None)
    return name if name is not None else str(item)


def encode_list(items: Iterable) -> str:
    """Join items (enum members by name) with ', '."""
    return SEPARATOR.join(_token(i) for i in items)


def decode_list(text: str, decoder: Callable[[str], T]) -> List[T]:
    """
    Split `text` on commas and decode every token.

    Raises
    ------
    CodecError
        If a token is rejected by `decoder`.
    """
    if text is None:
        raise CodecError("Cannot decode a missing list")
    out = []
    for raw in str(text).split(","):
        tok = raw.strip()
        if not tok:
            continue
        try:
            out.append(decoder(tok))
        except (ValueError, SchemaError) as e:
            raise CodecError("Unrecognized list element '{}'".format(tok), {"text": text}) from e
    return out


def decode_ints(text: str) -> List[int]:
    return decode_list(text, int)


def decode_dofs(text: str) -> List[DispDof]:
    return decode_list(text, lambda tok: parse_enum(DispDof, tok))
