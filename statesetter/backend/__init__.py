from .abc import StorageBackendAbc
from .json_rpc import (
    AnvilStorageBackend,
    GanacheStorageBackend,
    HardhatStorageBackend,
    JsonRpcStorageBackend,
)
from .memory import InMemoryStorageBackend
