from __future__ import annotations

import enum
import re
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from statesetter.exceptions import LayoutNotFoundError

from .solc_output import (
    SolcOutputStorageLayoutStorage,
    SolcOutputStorageLayoutType,
    SolcOutputStorageLayoutTypeEncodingEnum,
)

_int_re = re.compile(r"^int(?P<bits>\d+)$")
_fixed_bytes_re = re.compile(r"^bytes(?P<size>\d+)$")


class EncodingKind(enum.Enum):
    """
    Storage strategy of a type. Every resolution step dispatches on this tag.
    """

    SCALAR = enum.auto()
    MAPPING = enum.auto()
    DYNAMIC_ARRAY = enum.auto()
    FIXED_ARRAY = enum.auto()
    STRUCT = enum.auto()
    BYTES = enum.auto()

    @property
    def is_container(self) -> bool:
        return self in {
            EncodingKind.MAPPING,
            EncodingKind.DYNAMIC_ARRAY,
            EncodingKind.FIXED_ARRAY,
            EncodingKind.STRUCT,
        }


class ValueKind(enum.Enum):
    """
    How a single value of a type is represented inside a storage word.
    """

    NONE = enum.auto()
    UINT = enum.auto()
    INT = enum.auto()
    BOOL = enum.auto()
    ADDRESS = enum.auto()
    FIXED_BYTES = enum.auto()
    STRING = enum.auto()
    BYTES = enum.auto()


class LayoutModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class MemberInfo(LayoutModel):
    label: str
    type: str
    slot: int
    """Slot relative to the struct base slot."""
    offset: int


class VariableInfo(LayoutModel):
    label: str
    type: str
    slot: int
    offset: int
    contract: Optional[str] = None

    @classmethod
    def from_solc(cls, storage: SolcOutputStorageLayoutStorage) -> VariableInfo:
        return cls(
            label=storage.label,
            type=storage.type,
            slot=storage.slot,
            offset=storage.offset,
            contract=storage.contract,
        )


class TypeInfo(LayoutModel):
    id: str
    encoding_kind: EncodingKind
    value_kind: ValueKind
    label: str
    number_of_bytes: int
    members: Tuple[MemberInfo, ...] = ()
    key: Optional[str] = None
    value: Optional[str] = None
    base: Optional[str] = None

    @property
    def bits(self) -> int:
        return min(self.number_of_bytes, 32) * 8

    @property
    def member_names(self) -> Tuple[str, ...]:
        return tuple(m.label for m in self.members)

    def member(self, name: str) -> Optional[MemberInfo]:
        return next((m for m in self.members if m.label == name), None)

    @classmethod
    def from_solc(cls, type_id: str, info: SolcOutputStorageLayoutType) -> TypeInfo:
        if info.encoding == SolcOutputStorageLayoutTypeEncodingEnum.MAPPING:
            if info.key is None or info.value is None:
                raise LayoutNotFoundError(
                    f"Mapping type {type_id} is missing key or value type"
                )
            kind = EncodingKind.MAPPING
        elif info.encoding == SolcOutputStorageLayoutTypeEncodingEnum.DYNAMIC_ARRAY:
            if info.base is None:
                raise LayoutNotFoundError(
                    f"Dynamic array type {type_id} is missing base type"
                )
            kind = EncodingKind.DYNAMIC_ARRAY
        elif info.encoding == SolcOutputStorageLayoutTypeEncodingEnum.BYTES:
            kind = EncodingKind.BYTES
        elif info.members is not None:
            kind = EncodingKind.STRUCT
        elif info.base is not None:
            kind = EncodingKind.FIXED_ARRAY
        else:
            kind = EncodingKind.SCALAR

        if info.number_of_bytes <= 0:
            raise LayoutNotFoundError(
                f"Type {type_id} has invalid size {info.number_of_bytes}"
            )

        return cls(
            id=type_id,
            encoding_kind=kind,
            value_kind=_value_kind(kind, info.label),
            label=info.label,
            number_of_bytes=info.number_of_bytes,
            members=tuple(
                MemberInfo(label=m.label, type=m.type, slot=m.slot, offset=m.offset)
                for m in info.members or ()
            ),
            key=info.key,
            value=info.value,
            base=info.base,
        )


def _value_kind(kind: EncodingKind, label: str) -> ValueKind:
    if kind.is_container:
        return ValueKind.NONE
    if kind == EncodingKind.BYTES:
        return ValueKind.STRING if label == "string" else ValueKind.BYTES

    if label == "bool":
        return ValueKind.BOOL
    if label in {"address", "address payable"} or label.startswith("contract "):
        return ValueKind.ADDRESS
    if _int_re.match(label):
        return ValueKind.INT
    if _fixed_bytes_re.match(label):
        return ValueKind.FIXED_BYTES
    # uintN, enums and user defined value types
    return ValueKind.UINT


UINT256 = TypeInfo(
    id="t_uint256",
    encoding_kind=EncodingKind.SCALAR,
    value_kind=ValueKind.UINT,
    label="uint256",
    number_of_bytes=32,
)
