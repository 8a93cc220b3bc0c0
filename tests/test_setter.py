import pytest

from statesetter.backend import InMemoryStorageBackend
from statesetter.exceptions import (
    BackendError,
    PathTooShortError,
    StateSetterError,
    UnsupportedError,
    ValueOverflowError,
)
from statesetter.layout import LayoutIndex
from statesetter.storage import StateSetter, get_value, set_value
from statesetter.storage.slots import (
    dynamic_array_base_slot,
    keccak256,
    mapping_slot,
    pad32,
    slot_from_bytes,
)

TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
ALICE = "0x0000000000000000000000000000000000000001"
BOB = "0x00000000000000000000000000000000000000b0"


class FailingStorageBackend(InMemoryStorageBackend):
    def get_storage_at(self, address: str, position: int) -> bytes:
        raise ConnectionError("connection refused")

    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        raise ConnectionError("connection refused")


def test_set_mapping_value(layout, backend):
    cell = set_value(layout, backend, TOKEN, "balances", [ALICE], 500)

    expected_slot = slot_from_bytes(keccak256(pad32(1) + pad32(3)))
    assert cell.slot == expected_slot
    assert backend.gets == []
    assert backend.sets == [(TOKEN, expected_slot, bytes(30) + b"\x01\xf4")]

    assert get_value(layout, backend, TOKEN, "balances", [ALICE]) == 500


def test_set_packed_value(layout, backend):
    backend.set_storage_at(TOKEN, 0, bytes(31) + b"\xff")
    backend.sets.clear()

    set_value(layout, backend, TOKEN, "decimals", None, 7)
    assert backend.gets == [(TOKEN, 0)]
    assert len(backend.sets) == 1
    assert backend.get_storage_at(TOKEN, 0) == bytes(10) + b"\x07" + bytes(20) + b"\xff"

    set_value(layout, backend, TOKEN, "paused", None, True)
    word = backend.get_storage_at(TOKEN, 0)
    assert word == bytes(10) + b"\x07\x01" + bytes(19) + b"\xff"

    assert get_value(layout, backend, TOKEN, "decimals") == 7
    assert get_value(layout, backend, TOKEN, "paused") is True
    assert get_value(layout, backend, TOKEN, "owner").lower() == "0x" + "00" * 19 + "ff"


def test_set_signed_and_fixed_bytes(layout, backend):
    set_value(layout, backend, TOKEN, "delta", None, -1)
    set_value(layout, backend, TOKEN, "selector", None, "0xdeadbeef")

    word = backend.get_storage_at(TOKEN, 14)
    assert word == bytes(12) + b"\xde\xad\xbe\xef" + b"\xff" * 16
    assert get_value(layout, backend, TOKEN, "delta") == -1
    assert get_value(layout, backend, TOKEN, "selector") == b"\xde\xad\xbe\xef"


def test_set_short_string(layout, backend):
    set_value(layout, backend, TOKEN, "name", None, "Hello")
    assert backend.get_storage_at(TOKEN, 13) == b"Hello" + bytes(26) + b"\x0a"
    assert get_value(layout, backend, TOKEN, "name") == "Hello"


def test_get_string_invalid_utf8(layout, backend):
    backend.set_storage_at(TOKEN, 13, b"\xff\xfe" + bytes(29) + b"\x04")
    with pytest.raises(StateSetterError):
        get_value(layout, backend, TOKEN, "name")


def test_set_value_failure_before_write(layout, backend):
    with pytest.raises(ValueOverflowError):
        set_value(layout, backend, TOKEN, "decimals", None, 256)
    with pytest.raises(UnsupportedError):
        set_value(layout, backend, TOKEN, "name", None, "a" * 32)
    with pytest.raises(PathTooShortError):
        set_value(layout, backend, TOKEN, "balances", None, 1)

    assert backend.gets == []
    assert backend.sets == []


def test_backend_error(layout):
    backend = FailingStorageBackend()

    with pytest.raises(BackendError) as e:
        set_value(layout, backend, TOKEN, "totalSupply", None, 1)
    assert e.value.address == TOKEN
    assert e.value.slot == 1
    assert isinstance(e.value.__cause__, ConnectionError)

    with pytest.raises(BackendError) as e:
        get_value(layout, backend, TOKEN, "balances", [ALICE])
    assert e.value.slot == mapping_slot(3, pad32(1))


def test_state_setter(layout, backend):
    setter = StateSetter(layout, backend, TOKEN)
    assert setter.address == TOKEN
    assert setter.layout is layout
    assert repr(setter) == f"StateSetter(address='{TOKEN}')"

    setter.set_simple_state("totalSupply", 10**18)
    assert setter.get_state("totalSupply") == 10**18

    setter.set_mapping_value("balances", BOB, 42)
    assert setter.get_state("balances", [BOB]) == 42

    cell = setter.set_nested_mapping_value("allowances", [ALICE, BOB], 10)
    assert cell.slot == mapping_slot(mapping_slot(4, pad32(1)), pad32(0xB0))
    assert setter.get_state("allowances", f"[{ALICE}][{BOB}]") == 10

    cell = setter.set_array_element("fixedValues", 2, 9)
    assert cell.slot == 10
    assert setter.get_storage_word(10) == pad32(9)

    cell = setter.set_array_length("holders", 3)
    assert cell.slot == 2
    assert setter.get_state("holders", "length") == 3

    setter.set_array_element("holders", 1, ALICE)
    assert setter.get_storage_word(dynamic_array_base_slot(2) + 1) == pad32(1)


def test_state_setter_structs(layout, backend):
    setter = StateSetter(layout, backend, TOKEN)

    cell = setter.set_struct_field("person", "age", 30)
    assert cell.slot == 6
    assert setter.get_state("person", "age") == 30

    cell = setter.set_nested_struct_field("people", [7], "age", 40)
    assert cell.slot == mapping_slot(11, pad32(7)) + 1
    assert setter.get_state("people", [7, "age"]) == 40

    setter.set_nested_state("history", [0, "wallet"], BOB)
    setter.set_nested_state("history", [0, "active"], True)
    word = setter.get_storage_word(dynamic_array_base_slot(15) + 2)
    assert word == bytes(11) + b"\x01" + bytes(19) + b"\xb0"

    assert setter.locate("person", "active").offset == 20


def test_state_setter_nested_array_length(layout_dict, backend):
    layout_dict["storage"].append(
        {"label": "groups", "offset": 0, "slot": "17", "type": "t_mapping(t_uint256,t_array(t_address)dyn_storage)"}
    )
    layout_dict["types"]["t_mapping(t_uint256,t_array(t_address)dyn_storage)"] = {
        "encoding": "mapping",
        "key": "t_uint256",
        "label": "mapping(uint256 => address[])",
        "numberOfBytes": "32",
        "value": "t_array(t_address)dyn_storage",
    }
    setter = StateSetter(LayoutIndex.from_dict(layout_dict), backend, TOKEN)
    cell = setter.set_array_length("groups", 2, [5])
    assert cell.slot == mapping_slot(17, pad32(5))
    assert setter.get_state("groups", "[5].length") == 2
