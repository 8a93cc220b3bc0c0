import pytest

from statesetter.storage.slots import (
    UINT256_MODULUS,
    dynamic_array_base_slot,
    dynamic_array_element_slot,
    fixed_array_slot,
    keccak256,
    mapping_slot,
    pad32,
    slot_from_bytes,
    slots_per_element,
    struct_member_slot,
)

KECCAK_EMPTY = bytes.fromhex(
    "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
)
KECCAK_ZERO_WORD = 0x290DECD9548B62A8D60345A988386FC84BA6BC95484008F6362F93160EF3E563
KECCAK_TWO_ZERO_WORDS = (
    0xAD3228B676F7D3CD4284A5443F17F1962B36E491B30A40B2405849E597BA5FB5
)


def test_keccak256():
    assert keccak256(b"") == KECCAK_EMPTY
    assert slot_from_bytes(keccak256(bytes(32))) == KECCAK_ZERO_WORD


def test_pad32():
    assert pad32(0) == bytes(32)
    assert pad32(500) == bytes(30) + b"\x01\xf4"
    assert pad32(-1) == b"\xff" * 32
    assert pad32(UINT256_MODULUS + 1) == pad32(1)
    assert pad32(b"\xab") == bytes(31) + b"\xab"

    with pytest.raises(ValueError):
        pad32(bytes(33))


def test_mapping_slot():
    assert mapping_slot(0, pad32(0)) == KECCAK_TWO_ZERO_WORDS
    assert mapping_slot(0, b"\x00") == KECCAK_TWO_ZERO_WORDS

    assert mapping_slot(3, pad32(1)) == slot_from_bytes(
        keccak256(pad32(1) + pad32(3))
    )
    assert mapping_slot(3, pad32(1)) != mapping_slot(4, pad32(1))


def test_mapping_slot_unpadded_key():
    assert mapping_slot(12, b"hello", padded=False) == slot_from_bytes(
        keccak256(b"hello" + pad32(12))
    )
    assert mapping_slot(12, b"hello", padded=False) != mapping_slot(
        12, b"hello", padded=True
    )
    assert mapping_slot(12, b"", padded=False) == slot_from_bytes(
        keccak256(pad32(12))
    )


def test_dynamic_array_slots():
    assert dynamic_array_base_slot(0) == KECCAK_ZERO_WORD
    assert dynamic_array_element_slot(0, 0) == KECCAK_ZERO_WORD
    assert dynamic_array_element_slot(0, 5) == KECCAK_ZERO_WORD + 5
    assert dynamic_array_element_slot(0, 2, 3) == KECCAK_ZERO_WORD + 6


def test_fixed_array_slot():
    assert fixed_array_slot(8, 0) == 8
    assert fixed_array_slot(8, 1000) == 1008
    assert fixed_array_slot(8, 2, 3) == 14


def test_slot_arithmetic_wraps():
    assert fixed_array_slot(UINT256_MODULUS - 1, 1) == 0
    assert struct_member_slot(UINT256_MODULUS - 1, 2) == 1
    assert 0 <= dynamic_array_element_slot(1, 2**255, 2) < UINT256_MODULUS


def test_slots_per_element():
    assert slots_per_element(0) == 1
    assert slots_per_element(1) == 1
    assert slots_per_element(32) == 1
    assert slots_per_element(33) == 2
    assert slots_per_element(96) == 3
