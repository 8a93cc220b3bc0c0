from __future__ import annotations

from typing import Union

from statesetter.config import StateSetterConfig
from statesetter.config.data_model import ChainEnum
from statesetter.core import get_logger
from statesetter.json_rpc import JsonRpcCommunicator

from .abc import StorageBackendAbc

logger = get_logger(__name__)


class JsonRpcStorageBackend(StorageBackendAbc):
    """
    Storage backend talking to a development chain (Anvil, Hardhat or Ganache) over JSON-RPC.
    """

    _communicator: JsonRpcCommunicator
    _block_identifier: Union[int, str]

    def __init__(
        self,
        communicator: JsonRpcCommunicator,
        *,
        block_identifier: Union[int, str] = "latest",
    ) -> None:
        self._communicator = communicator
        self._block_identifier = block_identifier

    @classmethod
    def for_chain(
        cls, chain: ChainEnum, communicator: JsonRpcCommunicator
    ) -> JsonRpcStorageBackend:
        if chain == ChainEnum.ANVIL:
            return AnvilStorageBackend(communicator)
        elif chain == ChainEnum.HARDHAT:
            return HardhatStorageBackend(communicator)
        elif chain == ChainEnum.GANACHE:
            return GanacheStorageBackend(communicator)
        raise ValueError(f"Unsupported chain: {chain}")

    @classmethod
    def from_config(
        cls, config: StateSetterConfig, communicator: JsonRpcCommunicator
    ) -> JsonRpcStorageBackend:
        return cls.for_chain(config.backend.chain, communicator)

    @staticmethod
    def _encode_block_identifier(block_identifier: Union[int, str]) -> str:
        if isinstance(block_identifier, int):
            return hex(block_identifier)
        elif isinstance(block_identifier, str):
            return block_identifier
        else:
            raise TypeError("block identifier must be either int or str")

    def get_storage_at(self, address: str, position: int) -> bytes:
        return bytes.fromhex(
            self._communicator.send_request(
                "eth_getStorageAt",
                [
                    address,
                    hex(position),
                    self._encode_block_identifier(self._block_identifier),
                ],
            )[2:].rjust(64, "0")
        )

    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        raise NotImplementedError(
            f"{self.__class__.__name__} does not support setting storage"
        )


class AnvilStorageBackend(JsonRpcStorageBackend):
    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        self._communicator.send_request(
            "anvil_setStorageAt", [address, hex(position), "0x" + value.hex()]
        )


class HardhatStorageBackend(JsonRpcStorageBackend):
    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        self._communicator.send_request(
            "hardhat_setStorageAt", [address, hex(position), "0x" + value.hex()]
        )


class GanacheStorageBackend(JsonRpcStorageBackend):
    def set_storage_at(self, address: str, position: int, value: bytes) -> None:
        self._communicator.send_request(
            "evm_setAccountStorageAt", [address, hex(position), "0x" + value.hex()]
        )
