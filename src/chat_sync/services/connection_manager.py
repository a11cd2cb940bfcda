from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from chat_sync.application.exceptions import ChatSyncError, NotAuthorizedError
from chat_sync.application.ports.realtime import Connection, EventHandler, RealtimeTransport
from chat_sync.domain.entities.user import UserIdentity
from chat_sync.domain.value_objects.enums import ConnectionStatus
from chat_sync.infrastructure.realtime.protocol import PRESENCE_SNAPSHOT
from chat_sync.services.presence_tracker import PresenceTracker

logger = logging.getLogger(__name__)


class SessionAuthority(Protocol):
    @property
    def identity(self) -> UserIdentity | None: ...

    async def log_out(self) -> None: ...


class ConnectionManager:
    """Owns at most one live connection, keyed to the current session identity."""

    def __init__(
        self,
        transport: RealtimeTransport,
        presence: PresenceTracker,
        endpoint: str,
    ) -> None:
        self._transport = transport
        self._presence = presence
        self._endpoint = endpoint
        self._session: SessionAuthority | None = None
        self._connection: Connection | None = None
        self._opening_for: str | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    def bind_session(self, session: SessionAuthority) -> None:
        self._session = session

    @property
    def connection(self) -> Connection | None:
        return self._connection

    def is_bound_to(self, identity_id: str) -> bool:
        conn = self._connection
        return conn is not None and conn.identity_id == identity_id

    def _current_identity(self) -> UserIdentity | None:
        return self._session.identity if self._session is not None else None

    async def connect(self) -> None:
        identity = self._current_identity()
        if identity is None:
            logger.debug("connect() without an identity, ignoring")
            return

        current = self._connection
        if current is not None:
            if current.identity_id == identity.id and current.status != ConnectionStatus.CLOSED:
                return
            logger.warning(
                "Replacing connection for %s before connecting as %s",
                current.identity_id, identity.id,
            )
            await self.disconnect()

        if self._opening_for == identity.id:
            return
        self._opening_for = identity.id
        try:
            conn = await self._transport.open(self._endpoint, identity.id)
        except NotAuthorizedError:
            logger.warning("Connection rejected as unauthorized, ending session")
            await self._end_session()
            return
        except ChatSyncError:
            logger.warning("Connection to %s failed", self._endpoint, exc_info=True)
            return
        finally:
            self._opening_for = None

        # The session may have ended or switched while the connection was opening.
        identity = self._current_identity()
        if identity is None or identity.id != conn.identity_id:
            logger.info("Discarding connection opened for stale identity %s", conn.identity_id)
            await conn.close()
            return

        conn.on_error(self._on_connection_error)
        conn.on_close(lambda: self._on_connection_lost(conn))
        conn.on(PRESENCE_SNAPSHOT, self._presence.apply_snapshot)
        self._connection = conn
        logger.info("Connected as %s", conn.identity_id)

    async def disconnect(self) -> None:
        conn = self._connection
        if conn is None:
            return
        self._connection = None
        self._presence.clear()
        if conn.status == ConnectionStatus.CLOSED:
            return
        await conn.close()
        logger.info("Disconnected %s", conn.identity_id)

    def attach_listener(self, event: str, handler: EventHandler) -> bool:
        """Register ``handler`` on the live connection. Dropped when there is none."""
        conn = self._connection
        if conn is None or conn.status == ConnectionStatus.CLOSED:
            logger.debug("No live connection, dropping %s listener", event)
            return False
        conn.on(event, handler)
        return True

    def detach_listener(self, event: str) -> None:
        conn = self._connection
        if conn is not None:
            conn.off(event)

    def _on_connection_lost(self, conn: Connection) -> None:
        if conn is not self._connection:
            return
        logger.info("Connection for %s dropped, clearing presence", conn.identity_id)
        self._presence.clear()

    def _on_connection_error(self, error: ChatSyncError) -> None:
        if not isinstance(error, NotAuthorizedError):
            logger.warning("Connection error: %s", error.detail)
            return
        logger.warning("Connection lost authorization, ending session")
        task = asyncio.create_task(self._end_session(), name="connection-auth-logout")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _end_session(self) -> None:
        if self._session is not None:
            await self._session.log_out()

    async def join(self) -> None:
        """Wait for session teardowns scheduled from connection callbacks."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
