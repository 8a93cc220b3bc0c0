from typing import Union

from Crypto.Hash import keccak

UINT256_MODULUS = 2**256
WORD_SIZE = 32


def keccak256(b: bytes) -> bytes:
    h = keccak.new(data=b, digest_bits=256)
    return h.digest()


def pad32(value: Union[int, bytes]) -> bytes:
    """
    Left pad an integer (taken modulo 2**256) or a byte string to 32 bytes.
    """
    if isinstance(value, int):
        return (value % UINT256_MODULUS).to_bytes(WORD_SIZE, "big")
    if len(value) > WORD_SIZE:
        raise ValueError(f"Cannot pad {len(value)} bytes to a 32-byte word")
    return value.rjust(WORD_SIZE, b"\x00")


def slot_from_bytes(b: bytes) -> int:
    return int.from_bytes(b, "big")


def mapping_slot(base_slot: int, key: bytes, *, padded: bool = True) -> int:
    """
    Slot of `mapping[key]` for a mapping declared at `base_slot`.

    Args:
        base_slot: Slot of the mapping itself.
        key: Encoded key. Value type keys are already ABI encoded to 32 bytes.
        padded: `False` for `string` and `bytes` keys, which are hashed as raw unpadded bytes.
    """
    key_bytes = pad32(key) if padded else key
    return slot_from_bytes(keccak256(key_bytes + pad32(base_slot)))


def dynamic_array_base_slot(slot: int) -> int:
    # length stays at `slot`, data starts at keccak256(slot)
    return slot_from_bytes(keccak256(pad32(slot)))


def fixed_array_slot(base_slot: int, index: int, slots_per_element: int = 1) -> int:
    return (base_slot + index * slots_per_element) % UINT256_MODULUS


def dynamic_array_element_slot(
    slot: int, index: int, slots_per_element: int = 1
) -> int:
    return fixed_array_slot(dynamic_array_base_slot(slot), index, slots_per_element)


def struct_member_slot(base_slot: int, relative_slot: int) -> int:
    # structs always start a new slot, member offset is taken from the member itself
    return (base_slot + relative_slot) % UINT256_MODULUS


def slots_per_element(number_of_bytes: int) -> int:
    return max(1, -(-number_of_bytes // WORD_SIZE))
