from __future__ import annotations

from typing import Any, Sequence, Union

from statesetter.backend.abc import StorageBackendAbc
from statesetter.core import get_logger
from statesetter.exceptions import BackendError, StateSetterError
from statesetter.layout.index import LayoutIndex

from .codec import decode, encode, merge_partial_word
from .path import LengthMarker, RawSegment, StructField, normalize_path
from .resolver import DEFAULT_MAX_PATH_DEPTH, ResolvedCell, resolve

logger = get_logger(__name__)

PathLike = Union[None, str, Sequence[RawSegment]]


def _read_word(backend: StorageBackendAbc, address: str, slot: int) -> bytes:
    try:
        return backend.get_storage_at(address, slot)
    except StateSetterError:
        raise
    except Exception as e:
        raise BackendError(address, slot, str(e)) from e


def _write_word(
    backend: StorageBackendAbc, address: str, slot: int, word: bytes
) -> None:
    try:
        backend.set_storage_at(address, slot, word)
    except StateSetterError:
        raise
    except Exception as e:
        raise BackendError(address, slot, str(e)) from e


def set_value(
    layout: LayoutIndex,
    backend: StorageBackendAbc,
    address: str,
    var_name: str,
    path: PathLike,
    value: Any,
    *,
    max_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> ResolvedCell:
    """
    Write `value` into the storage cell reachable from `var_name` through `path`.

    The location is resolved and the value encoded before the backend is touched, so a failing path or value
    never leads to a partial write. Values sharing a slot with other variables are merged into the current
    slot content, which requires one extra read. The read and the write are not atomic.

    Returns:
        The storage cell that was written.
    """
    cell = resolve(layout, var_name, path, max_depth=max_depth)
    encoded = encode(value, cell.type_info)

    if cell.is_partial:
        current = _read_word(backend, address, cell.slot)
        word = merge_partial_word(current, encoded, cell.offset, cell.width)
    else:
        word = encoded

    logger.debug(
        f"Setting {address} slot {hex(cell.slot)} (offset {cell.offset}, width {cell.width}) to 0x{word.hex()}"
    )
    _write_word(backend, address, cell.slot, word)
    return cell


def get_value(
    layout: LayoutIndex,
    backend: StorageBackendAbc,
    address: str,
    var_name: str,
    path: PathLike = None,
    *,
    max_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> Any:
    """
    Read and decode the value stored in the cell reachable from `var_name` through `path`.
    """
    cell = resolve(layout, var_name, path, max_depth=max_depth)
    word = _read_word(backend, address, cell.slot)
    return decode(word, cell.type_info, cell.offset)


class StateSetter:
    """
    Storage access bound to a single deployed contract.
    """

    _layout: LayoutIndex
    _backend: StorageBackendAbc
    _address: str
    _max_depth: int

    def __init__(
        self,
        layout: LayoutIndex,
        backend: StorageBackendAbc,
        address: str,
        *,
        max_depth: int = DEFAULT_MAX_PATH_DEPTH,
    ):
        self._layout = layout
        self._backend = backend
        self._address = address
        self._max_depth = max_depth

    @property
    def address(self) -> str:
        return self._address

    @property
    def layout(self) -> LayoutIndex:
        return self._layout

    def locate(self, var_name: str, path: PathLike = None) -> ResolvedCell:
        return resolve(self._layout, var_name, path, max_depth=self._max_depth)

    def set_state(self, var_name: str, value: Any, path: PathLike = None) -> ResolvedCell:
        return set_value(
            self._layout,
            self._backend,
            self._address,
            var_name,
            path,
            value,
            max_depth=self._max_depth,
        )

    def get_state(self, var_name: str, path: PathLike = None) -> Any:
        return get_value(
            self._layout,
            self._backend,
            self._address,
            var_name,
            path,
            max_depth=self._max_depth,
        )

    def set_simple_state(self, var_name: str, value: Any) -> ResolvedCell:
        return self.set_state(var_name, value)

    def set_mapping_value(self, var_name: str, key: Any, value: Any) -> ResolvedCell:
        return self.set_state(var_name, value, [key])

    def set_nested_mapping_value(
        self, var_name: str, keys: Sequence[Any], value: Any
    ) -> ResolvedCell:
        return self.set_state(var_name, value, list(keys))

    def set_array_element(self, var_name: str, index: int, value: Any) -> ResolvedCell:
        return self.set_state(var_name, value, [index])

    def set_array_length(
        self, var_name: str, length: int, path: PathLike = None
    ) -> ResolvedCell:
        return self.set_state(var_name, length, normalize_path(path) + [LengthMarker()])

    def set_struct_field(
        self, var_name: str, field_name: str, value: Any
    ) -> ResolvedCell:
        return self.set_state(var_name, value, [StructField(field_name)])

    def set_nested_struct_field(
        self,
        var_name: str,
        path: Sequence[RawSegment],
        field_name: str,
        value: Any,
    ) -> ResolvedCell:
        return self.set_state(var_name, value, list(path) + [StructField(field_name)])

    def set_nested_state(
        self, var_name: str, path: Sequence[RawSegment], value: Any
    ) -> ResolvedCell:
        return self.set_state(var_name, value, path)

    def get_storage_word(self, slot: int) -> bytes:
        return _read_word(self._backend, self._address, slot)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self._address!r})"

