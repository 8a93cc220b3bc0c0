import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

from statesetter.backend import InMemoryStorageBackend
from statesetter.layout import LayoutIndex

CONTRACT = "contracts/Token.sol:Token"
PERSON = "t_struct(Person)10_storage"

TOKEN_LAYOUT: Dict[str, Any] = {
    "storage": [
        {"astId": 1, "contract": CONTRACT, "label": "owner", "offset": 0, "slot": "0", "type": "t_address"},
        {"astId": 2, "contract": CONTRACT, "label": "paused", "offset": 20, "slot": "0", "type": "t_bool"},
        {"astId": 3, "contract": CONTRACT, "label": "decimals", "offset": 21, "slot": "0", "type": "t_uint8"},
        {"astId": 4, "contract": CONTRACT, "label": "totalSupply", "offset": 0, "slot": "1", "type": "t_uint256"},
        {"astId": 5, "contract": CONTRACT, "label": "holders", "offset": 0, "slot": "2", "type": "t_array(t_address)dyn_storage"},
        {"astId": 6, "contract": CONTRACT, "label": "balances", "offset": 0, "slot": "3", "type": "t_mapping(t_address,t_uint256)"},
        {"astId": 7, "contract": CONTRACT, "label": "allowances", "offset": 0, "slot": "4", "type": "t_mapping(t_address,t_mapping(t_address,t_uint256))"},
        {"astId": 11, "contract": CONTRACT, "label": "person", "offset": 0, "slot": "5", "type": PERSON},
        {"astId": 12, "contract": CONTRACT, "label": "fixedValues", "offset": 0, "slot": "8", "type": "t_array(t_uint256)3_storage"},
        {"astId": 13, "contract": CONTRACT, "label": "people", "offset": 0, "slot": "11", "type": f"t_mapping(t_uint256,{PERSON})"},
        {"astId": 14, "contract": CONTRACT, "label": "nameToId", "offset": 0, "slot": "12", "type": "t_mapping(t_string_memory_ptr,t_uint256)"},
        {"astId": 15, "contract": CONTRACT, "label": "name", "offset": 0, "slot": "13", "type": "t_string_storage"},
        {"astId": 16, "contract": CONTRACT, "label": "delta", "offset": 0, "slot": "14", "type": "t_int128"},
        {"astId": 17, "contract": CONTRACT, "label": "selector", "offset": 16, "slot": "14", "type": "t_bytes4"},
        {"astId": 18, "contract": CONTRACT, "label": "history", "offset": 0, "slot": "15", "type": f"t_array({PERSON})dyn_storage"},
        {"astId": 19, "contract": CONTRACT, "label": "data", "offset": 0, "slot": "16", "type": "t_bytes_storage"},
    ],
    "types": {
        "t_address": {"encoding": "inplace", "label": "address", "numberOfBytes": "20"},
        "t_bool": {"encoding": "inplace", "label": "bool", "numberOfBytes": "1"},
        "t_uint8": {"encoding": "inplace", "label": "uint8", "numberOfBytes": "1"},
        "t_uint256": {"encoding": "inplace", "label": "uint256", "numberOfBytes": "32"},
        "t_int128": {"encoding": "inplace", "label": "int128", "numberOfBytes": "16"},
        "t_bytes4": {"encoding": "inplace", "label": "bytes4", "numberOfBytes": "4"},
        "t_string_storage": {"encoding": "bytes", "label": "string", "numberOfBytes": "32"},
        "t_string_memory_ptr": {"encoding": "bytes", "label": "string", "numberOfBytes": "32"},
        "t_bytes_storage": {"encoding": "bytes", "label": "bytes", "numberOfBytes": "32"},
        "t_array(t_address)dyn_storage": {
            "base": "t_address",
            "encoding": "dynamic_array",
            "label": "address[]",
            "numberOfBytes": "32",
        },
        "t_array(t_uint256)3_storage": {
            "base": "t_uint256",
            "encoding": "inplace",
            "label": "uint256[3]",
            "numberOfBytes": "96",
        },
        "t_mapping(t_address,t_uint256)": {
            "encoding": "mapping",
            "key": "t_address",
            "label": "mapping(address => uint256)",
            "numberOfBytes": "32",
            "value": "t_uint256",
        },
        "t_mapping(t_address,t_mapping(t_address,t_uint256))": {
            "encoding": "mapping",
            "key": "t_address",
            "label": "mapping(address => mapping(address => uint256))",
            "numberOfBytes": "32",
            "value": "t_mapping(t_address,t_uint256)",
        },
        f"t_mapping(t_uint256,{PERSON})": {
            "encoding": "mapping",
            "key": "t_uint256",
            "label": "mapping(uint256 => struct Token.Person)",
            "numberOfBytes": "32",
            "value": PERSON,
        },
        "t_mapping(t_string_memory_ptr,t_uint256)": {
            "encoding": "mapping",
            "key": "t_string_memory_ptr",
            "label": "mapping(string => uint256)",
            "numberOfBytes": "32",
            "value": "t_uint256",
        },
        f"t_array({PERSON})dyn_storage": {
            "base": PERSON,
            "encoding": "dynamic_array",
            "label": "struct Token.Person[]",
            "numberOfBytes": "32",
        },
        PERSON: {
            "encoding": "inplace",
            "label": "struct Token.Person",
            "members": [
                {"astId": 8, "contract": CONTRACT, "label": "name", "offset": 0, "slot": "0", "type": "t_string_storage"},
                {"astId": 9, "contract": CONTRACT, "label": "age", "offset": 0, "slot": "1", "type": "t_uint256"},
                {"astId": 10, "contract": CONTRACT, "label": "wallet", "offset": 0, "slot": "2", "type": "t_address"},
                {"astId": 20, "contract": CONTRACT, "label": "active", "offset": 20, "slot": "2", "type": "t_bool"},
            ],
            "numberOfBytes": "96",
        },
    },
}



class RecordingStorageBackend(InMemoryStorageBackend):
    gets: List[Tuple[str, int]]
    sets: List[Tuple[str, int, bytes]]

    def __init__(self) -> None:
        super().__init__()
        self.gets = []
        self.sets = []

    def get_storage_at(self, address: str, position: int) -> bytes:
        self.gets.append((address, position))
        return super().get_storage_at(address, position)

    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        self.sets.append((address, position, value))
        super().set_storage_at(address, position, value)


@pytest.fixture()
def layout_dict() -> Dict[str, Any]:
    return copy.deepcopy(TOKEN_LAYOUT)


@pytest.fixture()
def layout(layout_dict) -> LayoutIndex:
    return LayoutIndex.from_dict(layout_dict)


@pytest.fixture()
def backend() -> RecordingStorageBackend:
    return RecordingStorageBackend()


@pytest.fixture()
def layout_file(tmp_path: Path, layout_dict) -> Path:
    path = tmp_path / "Token.layout.json"
    path.write_text(json.dumps(layout_dict))
    return path
