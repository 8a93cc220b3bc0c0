from __future__ import annotations

from typing import Any, Tuple, Union

import eth_utils
from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingTypeError, ValueOutOfBounds
from eth_abi.packed import encode_packed

from statesetter.exceptions import (
    PathTooShortError,
    TypeMismatchError,
    UnsupportedError,
    ValueOverflowError,
)
from statesetter.layout.types import EncodingKind, TypeInfo, ValueKind

from .slots import WORD_SIZE

SHORT_BYTES_MAX_LENGTH = 31


def _to_int(value: Any, type_info: TypeInfo) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    if isinstance(value, str):
        s = value.strip()
        try:
            if s.lower().startswith(("0x", "-0x")):
                return int(s, 16)
            return int(s, 10)
        except ValueError:
            pass
    raise TypeMismatchError(
        f"{type_info.label} requires integer value but got {value!r} of type {type(value).__name__}"
    )


def _to_bool(value: Any, type_info: TypeInfo) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in {0, 1}:
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in {"true", "false", "1", "0"}:
        return value.strip().lower() in {"true", "1"}
    raise TypeMismatchError(
        f"{type_info.label} requires bool value but got {value!r} of type {type(value).__name__}"
    )


def _to_bytes(value: Any, type_info: TypeInfo) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value.startswith(("0x", "0X")):
            try:
                return eth_utils.decode_hex(value)
            except ValueError as e:
                raise TypeMismatchError(
                    f"{type_info.label} requires hex encoded bytes but got {value!r}"
                ) from e
        return value.encode("utf-8")
    raise TypeMismatchError(
        f"{type_info.label} requires bytes value but got {value!r} of type {type(value).__name__}"
    )


def _to_address(value: Any, type_info: TypeInfo) -> bytes:
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value < 2**160:
            raise ValueOverflowError(f"{value} does not fit into {type_info.label}")
        return value.to_bytes(20, "big")
    if isinstance(value, (str, bytes, bytearray)):
        try:
            return eth_utils.to_canonical_address(value)
        except (ValueError, TypeError) as e:
            raise TypeMismatchError(
                f"{type_info.label} requires address value but got {value!r}"
            ) from e
    raise TypeMismatchError(
        f"{type_info.label} requires address value but got {value!r} of type {type(value).__name__}"
    )


def _encode_integer(abi_type: str, value: int, type_info: TypeInfo) -> bytes:
    try:
        return encode_packed([abi_type], [value])
    except ValueOutOfBounds as e:
        raise ValueOverflowError(
            f"{value} does not fit into {type_info.label} ({type_info.number_of_bytes} bytes)"
        ) from e


def encode(value: Any, type_info: TypeInfo) -> bytes:
    """
    Encode a single value into a 32-byte storage word.

    Value types are placed into the low `number_of_bytes` bytes of the word, so that the result can be merged
    into a packed slot with [merge_partial_word][statesetter.storage.codec.merge_partial_word].
    Signed integers are stored in two's complement of exactly the declared width.
    Strings and bytes shorter than 32 bytes use the in-place encoding (data left aligned, `length * 2` in the lowest byte).

    Raises:
        PathTooShortError: The type is a mapping, array or struct.
        ValueOverflowError: The value does not fit into the declared width.
        UnsupportedError: The string or bytes value is longer than 31 bytes.
        TypeMismatchError: The value cannot be interpreted as the given type.
    """
    if type_info.encoding_kind.is_container:
        raise PathTooShortError(
            f"{type_info.label} is a container, extend the path to address a single value"
        )

    kind = type_info.value_kind
    if kind == ValueKind.UINT:
        data = _encode_integer(
            f"uint{type_info.bits}", _to_int(value, type_info), type_info
        )
    elif kind == ValueKind.INT:
        data = _encode_integer(
            f"int{type_info.bits}", _to_int(value, type_info), type_info
        )
    elif kind == ValueKind.BOOL:
        data = b"\x01" if _to_bool(value, type_info) else b"\x00"
    elif kind == ValueKind.ADDRESS:
        data = _to_address(value, type_info)
    elif kind == ValueKind.FIXED_BYTES:
        data = _to_bytes(value, type_info)
        if len(data) > type_info.number_of_bytes:
            raise ValueOverflowError(
                f"{type_info.label} requires at most {type_info.number_of_bytes} bytes but got {len(data)}"
            )
        data = data.ljust(type_info.number_of_bytes, b"\x00")
    elif kind in {ValueKind.STRING, ValueKind.BYTES}:
        if kind == ValueKind.STRING and not isinstance(value, (str, bytes, bytearray)):
            raise TypeMismatchError(
                f"{type_info.label} requires string value but got {value!r} of type {type(value).__name__}"
            )
        raw = (
            value.encode("utf-8")
            if kind == ValueKind.STRING and isinstance(value, str)
            else _to_bytes(value, type_info)
        )
        if len(raw) > SHORT_BYTES_MAX_LENGTH:
            raise UnsupportedError(
                f"{type_info.label} values longer than {SHORT_BYTES_MAX_LENGTH} bytes are not supported (got {len(raw)} bytes)"
            )
        return raw.ljust(SHORT_BYTES_MAX_LENGTH, b"\x00") + bytes([len(raw) * 2])
    else:
        raise UnsupportedError(f"Cannot encode values of type {type_info.label}")

    return data.rjust(WORD_SIZE, b"\x00")


def decode(word: bytes, type_info: TypeInfo, offset: int = 0) -> Any:
    """
    Decode a value of the given type stored at byte `offset` (counted from the low-order end) of a storage word.

    Raises:
        PathTooShortError: The type is a mapping, array or struct.
        UnsupportedError: The string or bytes value uses the long encoding or has an invalid length byte.
        TypeMismatchError: The stored string is not valid UTF-8.
    """
    if len(word) != WORD_SIZE:
        word = word.rjust(WORD_SIZE, b"\x00")
    if type_info.encoding_kind.is_container:
        raise PathTooShortError(
            f"{type_info.label} is a container, extend the path to address a single value"
        )

    kind = type_info.value_kind
    if kind in {ValueKind.STRING, ValueKind.BYTES}:
        if word[-1] % 2 == 1:
            raise UnsupportedError(
                f"{type_info.label} value is stored using the long encoding which is not supported"
            )
        length = word[-1] // 2
        if length > SHORT_BYTES_MAX_LENGTH:
            raise UnsupportedError(
                f"{type_info.label} value has invalid short encoding length {length}"
            )
        raw = word[:length]
        if kind == ValueKind.STRING:
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise TypeMismatchError(
                    f"{type_info.label} value 0x{raw.hex()} is not valid UTF-8"
                ) from e
        return raw

    width = type_info.number_of_bytes
    data = word[WORD_SIZE - offset - width : WORD_SIZE - offset]

    if kind == ValueKind.UINT:
        return int.from_bytes(data, "big")
    elif kind == ValueKind.INT:
        return int.from_bytes(data, "big", signed=True)
    elif kind == ValueKind.BOOL:
        return int.from_bytes(data, "big") != 0
    elif kind == ValueKind.ADDRESS:
        return eth_utils.to_checksum_address(data[-20:])
    elif kind == ValueKind.FIXED_BYTES:
        return data
    raise UnsupportedError(f"Cannot decode values of type {type_info.label}")


def merge_partial_word(
    current_word: bytes, new_value_word: bytes, offset: int, width: int
) -> bytes:
    """
    Replace `width` bytes at byte position `offset` (counted from the low-order end) of `current_word`
    with the low `width` bytes of `new_value_word`. All other bytes are kept.
    """
    if offset < 0 or width <= 0 or offset + width > WORD_SIZE:
        raise ValueError(f"Invalid packed location: offset {offset}, width {width}")

    current = int.from_bytes(current_word.rjust(WORD_SIZE, b"\x00"), "big")
    new = int.from_bytes(new_value_word.rjust(WORD_SIZE, b"\x00"), "big")
    mask = ((1 << (width * 8)) - 1) << (offset * 8)
    merged = (current & ~mask) | ((new << (offset * 8)) & mask)
    return merged.to_bytes(WORD_SIZE, "big")


def encode_mapping_key(raw: Any, key_type: TypeInfo) -> Tuple[bytes, bool]:
    """
    Encode a mapping key according to the declared key type.

    Returns:
        Encoded key and whether it is a 32-byte padded value type key (`True`) or raw `string`/`bytes` data (`False`).
    """
    kind = key_type.value_kind
    if kind == ValueKind.STRING:
        if isinstance(raw, (bytes, bytearray)):
            return bytes(raw), False
        if not isinstance(raw, str):
            raise TypeMismatchError(
                f"{key_type.label} key requires string but got {raw!r} of type {type(raw).__name__}"
            )
        return raw.encode("utf-8"), False
    elif kind == ValueKind.BYTES:
        return _to_bytes(raw, key_type), False

    abi_type: str
    value: Union[int, bool, bytes]
    if kind == ValueKind.UINT:
        abi_type, value = f"uint{key_type.bits}", _to_int(raw, key_type)
    elif kind == ValueKind.INT:
        abi_type, value = f"int{key_type.bits}", _to_int(raw, key_type)
    elif kind == ValueKind.BOOL:
        abi_type, value = "bool", _to_bool(raw, key_type)
    elif kind == ValueKind.ADDRESS:
        abi_type, value = "address", _to_address(raw, key_type)
    elif kind == ValueKind.FIXED_BYTES:
        abi_type, value = f"bytes{key_type.number_of_bytes}", _to_bytes(raw, key_type)
    else:
        raise UnsupportedError(f"{key_type.label} cannot be used as a mapping key")

    try:
        return abi_encode([abi_type], [value]), True
    except ValueOutOfBounds as e:
        raise ValueOverflowError(f"Key {raw!r} does not fit into {key_type.label}") from e
    except EncodingTypeError as e:
        raise TypeMismatchError(
            f"Key {raw!r} cannot be encoded as {key_type.label}"
        ) from e
