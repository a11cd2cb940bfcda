"""Socket.IO implementation of the ``RealtimeTransport`` port."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from chat_sync.application.exceptions import ChatSyncError, ConnectionAuthError, TransportError
from chat_sync.application.ports.realtime import CloseHandler, ErrorHandler, EventHandler
from chat_sync.domain.value_objects.enums import ConnectionStatus
from chat_sync.infrastructure.realtime.protocol import is_unauthorized

logger = logging.getLogger(__name__)


def _error_from(data: Any) -> ChatSyncError:
    if is_unauthorized(data):
        return ConnectionAuthError("unauthorized")
    detail = data.get("message", "") if isinstance(data, dict) else str(data or "")
    return TransportError(detail or "connection error")


class SocketIOConnection:
    """One ``socketio.AsyncClient`` correlated to an identity via the ``userId`` query."""

    def __init__(self, client: socketio.AsyncClient, endpoint: str, identity_id: str) -> None:
        self._client = client
        self.endpoint = endpoint
        self.identity_id = identity_id
        self._handlers: dict[str, list[EventHandler]] = {}
        self._error_handlers: list[ErrorHandler] = []
        self._close_handlers: list[CloseHandler] = []
        self._last_error: Any = None
        self._closed = False

        client.on("connect_error", self._on_connect_error)
        client.on("disconnect", self._on_disconnect)
        client.on("*", self._dispatch)

    @property
    def status(self) -> ConnectionStatus:
        if self._closed:
            return ConnectionStatus.CLOSED
        if self._client.connected:
            return ConnectionStatus.OPEN
        return ConnectionStatus.CONNECTING

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str) -> None:
        self._handlers.pop(event, None)

    def on_error(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    def on_close(self, handler: CloseHandler) -> None:
        self._close_handlers.append(handler)

    async def start(self, *, transports: list[str], socketio_path: str, wait_timeout: float) -> None:
        url = f"{self.endpoint}?{urlencode({'userId': self.identity_id})}"
        try:
            await self._client.connect(
                url,
                transports=transports,
                socketio_path=socketio_path,
                wait_timeout=wait_timeout,
            )
        except SocketConnectionError as exc:
            self._closed = True
            await self._client.disconnect()
            raise _error_from(self._last_error or str(exc)) from exc

    async def close(self) -> None:
        self._closed = True
        self._handlers.clear()
        await self._client.disconnect()

    async def _on_connect_error(self, data: Any = None) -> None:
        self._last_error = data
        logger.error("Socket connection error: %r", data)
        if self._closed:
            return
        error = _error_from(data)
        for handler in list(self._error_handlers):
            try:
                handler(error)
            except Exception:
                logger.exception("Error in connection error handler")

    async def _on_disconnect(self, *args: Any) -> None:
        logger.info("Socket disconnected (identity=%s)", self.identity_id)
        for handler in list(self._close_handlers):
            try:
                handler()
            except Exception:
                logger.exception("Error in connection close handler")

    async def _dispatch(self, event: str, *args: Any) -> None:
        data = args[0] if args else None
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(data)
            except Exception:
                logger.exception("Error in %s handler", event)


class SocketIOTransport:
    def __init__(
        self,
        *,
        transports: list[str] | None = None,
        socketio_path: str = "socket.io",
        reconnection: bool = True,
        connect_timeout: float = 10.0,
    ) -> None:
        self._transports = transports or ["websocket", "polling"]
        self._socketio_path = socketio_path
        self._reconnection = reconnection
        self._connect_timeout = connect_timeout

    async def open(self, endpoint: str, identity_id: str) -> SocketIOConnection:
        client = socketio.AsyncClient(
            reconnection=self._reconnection,
            logger=False,
            engineio_logger=False,
        )
        conn = SocketIOConnection(client, endpoint, identity_id)
        await conn.start(
            transports=self._transports,
            socketio_path=self._socketio_path,
            wait_timeout=self._connect_timeout,
        )
        logger.info("Socket connected to %s (identity=%s)", endpoint, identity_id)
        return conn
