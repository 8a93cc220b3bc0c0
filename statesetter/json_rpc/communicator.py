import json
from typing import Any, Dict, List, Optional

from statesetter.config import StateSetterConfig
from statesetter.core import get_logger

from .abc import ProtocolAbc
from .http import HttpProtocol
from .websocket import WebsocketProtocol

logger = get_logger(__name__)


class JsonRpcError(Exception):
    """
    Error object returned by the node instead of a result.
    """

    def __init__(self, data: Dict):
        super().__init__(data.get("message", data))
        self.data = data

    @property
    def code(self) -> Optional[int]:
        return self.data.get("code")


def _create_protocol(uri: str, timeout: float) -> ProtocolAbc:
    if uri.startswith(("http://", "https://")):
        return HttpProtocol(uri, timeout)
    elif uri.startswith(("ws://", "wss://")):
        return WebsocketProtocol(uri, timeout)
    raise ValueError(f"Invalid URI: {uri}")


class JsonRpcCommunicator:
    """
    Sends JSON-RPC requests to a development chain. Must be entered as a context manager before use.
    """

    _uri: str
    _protocol: ProtocolAbc
    _request_id: int
    _connected: bool

    def __init__(self, config: StateSetterConfig, uri: Optional[str] = None):
        self._uri = uri if uri is not None else config.backend.uri
        self._protocol = _create_protocol(self._uri, config.general.json_rpc_timeout)
        self._request_id = 0
        self._connected = False

    def __enter__(self):
        self._protocol.__enter__()
        self._connected = True
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self._protocol.__exit__(exc_type, exc_value, traceback)
        self._connected = False

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def connected(self) -> bool:
        return self._connected

    def send_request(self, method_name: str, params: Optional[List] = None) -> Any:
        request = {
            "jsonrpc": "2.0",
            "method": method_name,
            "params": params if params is not None else [],
            "id": self._request_id,
        }
        self._request_id += 1

        logger.debug(f"Sending request to {self._uri}:\n{request}")
        response = self._protocol.send_recv(json.dumps(request))
        logger.debug(f"Received response:\n{json.dumps(response)}")

        if "error" in response:
            raise JsonRpcError(response["error"])
        if response.get("id") != request["id"]:
            raise JsonRpcError(
                {"message": f"Response id {response.get('id')} does not match request id {request['id']}"}
            )
        return response["result"]
