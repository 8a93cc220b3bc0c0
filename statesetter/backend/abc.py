from abc import ABC, abstractmethod


class StorageBackendAbc(ABC):
    """
    Reads and writes raw 32-byte storage words of deployed contracts.
    """

    @abstractmethod
    def get_storage_at(self, address: str, position: int) -> bytes:
        ...

    @abstractmethod
    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        ...
