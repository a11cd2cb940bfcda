from __future__ import annotations

from typing import Any, Callable, Protocol

from chat_sync.application.exceptions import ChatSyncError
from chat_sync.domain.value_objects.enums import ConnectionStatus

EventHandler = Callable[[Any], None]
ErrorHandler = Callable[[ChatSyncError], None]
CloseHandler = Callable[[], None]


class Connection(Protocol):
    """A live bidirectional channel correlated to one identity."""

    endpoint: str
    identity_id: str

    @property
    def status(self) -> ConnectionStatus: ...

    def on(self, event: str, handler: EventHandler) -> None: ...
    def off(self, event: str) -> None: ...
    def on_error(self, handler: ErrorHandler) -> None: ...
    def on_close(self, handler: CloseHandler) -> None: ...
    async def close(self) -> None: ...


class RealtimeTransport(Protocol):
    async def open(self, endpoint: str, identity_id: str) -> Connection:
        """Open a connection. Raise ``ConnectionAuthError`` if the credential is rejected."""
        ...
