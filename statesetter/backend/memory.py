from typing import Dict, Tuple

import eth_utils

from statesetter.storage.slots import WORD_SIZE

from .abc import StorageBackendAbc


class InMemoryStorageBackend(StorageBackendAbc):
    """
    Storage kept in a dictionary. Unset slots read as zero words. Useful for dry runs and tests.
    """

    _storage: Dict[Tuple[str, int], bytes]

    def __init__(self) -> None:
        self._storage = {}

    @staticmethod
    def _key(address: str, position: int) -> Tuple[str, int]:
        return eth_utils.to_checksum_address(address), position

    def get_storage_at(self, address: str, position: int) -> bytes:
        return self._storage.get(self._key(address, position), bytes(WORD_SIZE))

    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        if len(value) != WORD_SIZE:
            raise ValueError(f"Storage value must be {WORD_SIZE} bytes long")
        self._storage[self._key(address, position)] = bytes(value)

    def dump(self, address: str) -> Dict[int, bytes]:
        address = eth_utils.to_checksum_address(address)
        return {slot: v for (a, slot), v in self._storage.items() if a == address}
