from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Sequence, Union

LENGTH_MARKERS = frozenset({"length", ".length"})


@dataclass(frozen=True)
class MappingKey:
    raw: Any


@dataclass(frozen=True)
class ArrayIndex:
    index: int


@dataclass(frozen=True)
class LengthMarker:
    pass


@dataclass(frozen=True)
class StructField:
    name: str


PathSegment = Union[MappingKey, ArrayIndex, LengthMarker, StructField]
RawSegment = Union[PathSegment, str, int, bytes, bool]

_path_token_re = re.compile(r"\[(?P<bracket>[^\]]*)\]|(?P<dotted>[^.\[\]]+)")


def parse_path(path: str) -> List[str]:
    """
    Split a path string such as `users[0x00...01].balances[3].length` or `person.age` into segments.
    Bracketed segments may contain dots (e.g. string mapping keys).
    """
    segments: List[str] = []
    pos = 0
    path = path.strip()
    while pos < len(path):
        if path[pos] == ".":
            pos += 1
            continue
        match = _path_token_re.match(path, pos)
        if match is None:
            raise ValueError(f"Invalid path {path!r} at position {pos}")
        if match.group("bracket") is not None:
            segments.append(match.group("bracket"))
        else:
            segments.append(match.group("dotted"))
        pos = match.end()
    return segments


def normalize_path(path: Union[None, str, Sequence[RawSegment]]) -> List[RawSegment]:
    if path is None:
        return []
    if isinstance(path, str):
        return list(parse_path(path))
    return list(path)
