from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from statesetter.utils import StrEnum

__doc__ = """Solc storage layout output data model as described by https://docs.soliditylang.org/en/latest/internals/layout_in_storage.html#json-output"""


def _to_camel(s: str) -> str:
    split = s.split("_")
    return split[0].lower() + "".join([w.capitalize() for w in split[1:]])


class SolcOutputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )


class SolcOutputStorageLayoutTypeEncodingEnum(StrEnum):
    INPLACE = "inplace"
    """Data is laid out contiguously in storage"""
    MAPPING = "mapping"
    """Keccak-256 hash-based method (see https://docs.soliditylang.org/en/latest/internals/layout_in_storage.html#mappings-and-dynamic-arrays)"""
    DYNAMIC_ARRAY = "dynamic_array"
    """Keccak-256 hash-based method (see https://docs.soliditylang.org/en/latest/internals/layout_in_storage.html#mappings-and-dynamic-arrays)"""
    BYTES = "bytes"
    """Single slot or Keccak-256 hash-based depending on the data size (see https://docs.soliditylang.org/en/latest/internals/layout_in_storage.html#bytes-and-string)"""


class SolcOutputStorageLayoutStorage(SolcOutputModel):
    ast_id: Optional[int] = None
    contract: Optional[str] = None
    label: str
    offset: int
    slot: int
    type: str


class SolcOutputStorageLayoutType(SolcOutputModel):
    encoding: SolcOutputStorageLayoutTypeEncodingEnum
    label: str
    number_of_bytes: int
    base: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    members: Optional[List[SolcOutputStorageLayoutStorage]] = None


class SolcOutputStorageLayout(SolcOutputModel):
    storage: List[SolcOutputStorageLayoutStorage]
    types: Optional[Dict[str, SolcOutputStorageLayoutType]] = None
