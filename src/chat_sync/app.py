from __future__ import annotations

import logging

from chat_sync.application.ports.api import ChatApi
from chat_sync.application.ports.notifier import LoggingNotifier, Notifier
from chat_sync.application.ports.realtime import RealtimeTransport
from chat_sync.config import Settings, settings as default_settings
from chat_sync.infrastructure.http.api_client import HttpChatApi
from chat_sync.infrastructure.realtime.socketio_transport import SocketIOTransport
from chat_sync.services.connection_manager import ConnectionManager
from chat_sync.services.conversation_sync import ConversationSync
from chat_sync.services.presence_tracker import PresenceTracker
from chat_sync.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


class ChatClient:
    """Composition root: the four components wired to their collaborators."""

    def __init__(
        self,
        api: ChatApi,
        transport: RealtimeTransport,
        notifier: Notifier,
        endpoint: str,
    ) -> None:
        self.api = api
        self.presence = PresenceTracker()
        self.connections = ConnectionManager(transport, self.presence, endpoint)
        self.session = SessionManager(api, self.connections, notifier)
        self.connections.bind_session(self.session)
        self.conversation = ConversationSync(api, self.connections, notifier)
        self._started = False

    async def startup(self) -> None:
        """Probe the existing session. Runs once per client."""
        if self._started:
            return
        self._started = True
        await self.session.check_session()
        logger.info("Startup finished in phase %s", self.session.phase)

    async def log_out(self) -> None:
        """Leave the conversation, then end the session."""
        await self.conversation.select_conversation(None)
        await self.session.log_out()

    async def shutdown(self) -> None:
        self.conversation.unsubscribe()
        await self.connections.join()
        await self.connections.disconnect()
        close = getattr(self.api, "aclose", None)
        if close is not None:
            await close()


def create_client(
    config: Settings | None = None,
    *,
    notifier: Notifier | None = None,
) -> ChatClient:
    config = config or default_settings
    api = HttpChatApi(config.API_BASE_URL, timeout=config.REQUEST_TIMEOUT_SECONDS)
    transport = SocketIOTransport(
        transports=config.SOCKET_TRANSPORTS,
        socketio_path=config.SOCKET_PATH,
        reconnection=config.SOCKET_RECONNECTION,
        connect_timeout=config.CONNECT_TIMEOUT_SECONDS,
    )
    return ChatClient(api, transport, notifier or LoggingNotifier(), config.SOCKET_URL)
