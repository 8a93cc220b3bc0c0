from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from typing_extensions import assert_never

from statesetter.core import get_logger
from statesetter.exceptions import (
    FieldNotFoundError,
    PathTooLongError,
    TypeMismatchError,
)
from statesetter.layout.index import LayoutIndex
from statesetter.layout.types import UINT256, EncodingKind, TypeInfo

from .codec import encode_mapping_key
from .path import (
    LENGTH_MARKERS,
    ArrayIndex,
    LengthMarker,
    MappingKey,
    RawSegment,
    StructField,
    normalize_path,
)
from .slots import (
    WORD_SIZE,
    dynamic_array_element_slot,
    fixed_array_slot,
    mapping_slot,
    pad32,
    slots_per_element,
    struct_member_slot,
)

logger = get_logger(__name__)

DEFAULT_MAX_PATH_DEPTH = 64


@dataclass(frozen=True)
class ResolvedCell:
    slot: int
    offset: int
    """Byte offset counted from the low-order end of the slot."""
    width: int
    type_info: TypeInfo

    @property
    def type_id(self) -> str:
        return self.type_info.id

    @property
    def slot_hex(self) -> str:
        return "0x" + pad32(self.slot).hex()

    @property
    def is_partial(self) -> bool:
        return self.offset != 0 or self.width != WORD_SIZE


def _as_mapping_key(segment: RawSegment, type_info: TypeInfo) -> MappingKey:
    if isinstance(segment, MappingKey):
        return segment
    if isinstance(segment, (ArrayIndex, LengthMarker, StructField)):
        raise TypeMismatchError(
            f"{type_info.label} requires a mapping key but got {segment!r}"
        )
    return MappingKey(segment)


def _as_array_segment(
    segment: RawSegment, type_info: TypeInfo
) -> Union[ArrayIndex, LengthMarker]:
    if isinstance(segment, (ArrayIndex, LengthMarker)):
        result = segment
    elif isinstance(segment, (MappingKey, StructField)):
        raise TypeMismatchError(
            f"{type_info.label} requires an array index but got {segment!r}"
        )
    elif isinstance(segment, str) and segment in LENGTH_MARKERS:
        result = LengthMarker()
    elif isinstance(segment, int) and not isinstance(segment, bool):
        result = ArrayIndex(segment)
    elif isinstance(segment, str) and segment.strip().isdecimal():
        result = ArrayIndex(int(segment.strip()))
    else:
        raise TypeMismatchError(
            f"{type_info.label} requires integer index to be specified but got {segment!r}"
        )

    if isinstance(result, ArrayIndex) and result.index < 0:
        raise TypeMismatchError(f"Negative index {result.index} for {type_info.label}")
    return result


def _as_struct_field(segment: RawSegment, type_info: TypeInfo) -> str:
    if isinstance(segment, StructField):
        return segment.name
    if isinstance(segment, str):
        return segment
    raise TypeMismatchError(
        f"{type_info.label} requires string member name to be specified but got {segment!r}"
    )


def _whole_cell(slot: int, offset: int, type_info: TypeInfo) -> ResolvedCell:
    if type_info.encoding_kind in {EncodingKind.SCALAR, EncodingKind.BYTES}:
        width = type_info.number_of_bytes
    else:
        width = min(type_info.number_of_bytes, WORD_SIZE)
    if offset + width > WORD_SIZE:
        raise TypeMismatchError(
            f"{type_info.label} at offset {offset} does not fit into a single slot"
        )
    return ResolvedCell(slot=slot, offset=offset, width=width, type_info=type_info)


def resolve(
    layout: LayoutIndex,
    var_name: str,
    path: Union[None, str, Sequence[RawSegment]] = None,
    *,
    max_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> ResolvedCell:
    """
    Compute the storage cell holding the value reachable from the state variable `var_name` through `path`.

    Path segments are mapping keys, array indices (or `length` for dynamic arrays) and struct member names,
    given either as raw values or as explicit [PathSegment][statesetter.storage.path.PathSegment] instances.
    Resolution performs no I/O.

    Args:
        layout: Storage layout index of the contract.
        var_name: Name of the top-level state variable.
        path: Segments leading from the variable to the target value.
        max_depth: Maximum number of path segments.

    Returns:
        Slot, offset and width of the target value together with its type.
    """
    segments = normalize_path(path)
    if len(segments) > max_depth:
        raise PathTooLongError(
            f"Path with {len(segments)} segments exceeds the maximum depth of {max_depth}"
        )

    var = layout.find_variable(var_name)
    type_info = layout.find_type(var.type)
    slot = var.slot
    offset = var.offset

    for pos, segment in enumerate(segments):
        kind = type_info.encoding_kind
        logger.debug(
            f"Resolving {var_name}: slot {hex(slot)}, offset {offset}, type {type_info.id}, segment {segment!r}"
        )

        if kind == EncodingKind.SCALAR or kind == EncodingKind.BYTES:
            raise PathTooLongError(
                f"{type_info.label} cannot be indexed with {segment!r} (path {segments[pos:]!r} is left over)"
            )
        elif kind == EncodingKind.MAPPING:
            assert type_info.key is not None and type_info.value is not None
            key = _as_mapping_key(segment, type_info)
            encoded_key, padded = encode_mapping_key(
                key.raw, layout.find_type(type_info.key)
            )
            slot = mapping_slot(slot, encoded_key, padded=padded)
            offset = 0
            type_info = layout.find_type(type_info.value)
        elif kind == EncodingKind.DYNAMIC_ARRAY:
            assert type_info.base is not None
            array_segment = _as_array_segment(segment, type_info)
            if isinstance(array_segment, LengthMarker):
                if pos + 1 != len(segments):
                    raise PathTooLongError(
                        f"Path {segments[pos + 1:]!r} follows the length of {type_info.label}"
                    )
                return ResolvedCell(slot=slot, offset=0, width=WORD_SIZE, type_info=UINT256)
            base = layout.find_type(type_info.base)
            slot = dynamic_array_element_slot(
                slot, array_segment.index, slots_per_element(base.number_of_bytes)
            )
            offset = 0
            type_info = base
        elif kind == EncodingKind.FIXED_ARRAY:
            assert type_info.base is not None
            array_segment = _as_array_segment(segment, type_info)
            if isinstance(array_segment, LengthMarker):
                raise TypeMismatchError(
                    f"{type_info.label} is a fixed size array and does not store its length"
                )
            base = layout.find_type(type_info.base)
            # no bounds check, indices past the declared length address the following slots
            slot = fixed_array_slot(
                slot, array_segment.index, slots_per_element(base.number_of_bytes)
            )
            offset = 0
            type_info = base
        elif kind == EncodingKind.STRUCT:
            name = _as_struct_field(segment, type_info)
            member = type_info.member(name)
            if member is None:
                raise FieldNotFoundError(type_info.label, name, type_info.member_names)
            slot = struct_member_slot(slot, member.slot)
            offset = member.offset
            type_info = layout.find_type(member.type)
        else:
            assert_never(kind)

    cell = _whole_cell(slot, offset, type_info)
    logger.debug(
        f"Resolved {var_name}{''.join(f'[{s!r}]' for s in segments)} to slot {hex(cell.slot)}, offset {cell.offset}, width {cell.width}"
    )
    return cell
