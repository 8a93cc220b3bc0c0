import json
from typing import Any, Dict, Optional

from websocket import WebSocket, WebSocketException, create_connection

from .abc import ProtocolAbc


class WebsocketProtocol(ProtocolAbc):
    """
    JSON-RPC over a single websocket connection kept open for the lifetime of the context manager.
    """

    _uri: str
    _timeout: float
    _connection: Optional[WebSocket]

    def __init__(self, uri: str, timeout: float):
        self._uri = uri
        self._timeout = timeout
        self._connection = None

    def __enter__(self):
        try:
            self._connection = create_connection(
                self._uri, skip_utf8_validation=True, timeout=self._timeout
            )
        except (OSError, WebSocketException) as e:
            raise ConnectionError(f"Cannot connect to {self._uri}: {e}") from e

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def send_recv(self, data: str) -> Dict[str, Any]:
        if self._connection is None:
            raise ConnectionError(f"Websocket connection to {self._uri} is not open")
        self._connection.send(data)  # pyright: ignore reportGeneralTypeIssues
        return json.loads(self._connection.recv())
