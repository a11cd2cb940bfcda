from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from chat_sync.application.dto.message import OutgoingMessage
from chat_sync.application.exceptions import ChatSyncError, user_message
from chat_sync.application.ports.api import ChatApi
from chat_sync.application.ports.notifier import Notifier
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import UserIdentity
from chat_sync.domain.value_objects.enums import NoticeKind
from chat_sync.infrastructure.http.mappers import message_to_entity
from chat_sync.infrastructure.realtime.protocol import MESSAGE_RECEIVED, MessageReceived
from chat_sync.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

PEERS_FAILED = "Failed to load users"
HISTORY_FAILED = "Failed to load messages"
SEND_FAILED = "Failed to send message"


class ConversationSync:
    """Selected peer and that peer's message list.

    Results of calls issued for an earlier selection are discarded: every
    selection change bumps ``_generation`` and each call compares the value it
    started with before applying anything.
    """

    def __init__(
        self,
        api: ChatApi,
        connections: ConnectionManager,
        notifier: Notifier,
    ) -> None:
        self._api = api
        self._connections = connections
        self._notifier = notifier
        self.selected_peer_id: str | None = None
        self.messages: list[Message] = []
        self.peers: list[UserIdentity] = []
        self.is_peers_loading = False
        self.is_messages_loading = False
        self._generation = 0
        self._subscribed = False

    def _is_current(self, generation: int, peer_id: str) -> bool:
        return generation == self._generation and peer_id == self.selected_peer_id

    def _append(self, message: Message) -> bool:
        if any(m.id == message.id for m in self.messages):
            logger.debug("Message %s already present, skipping", message.id)
            return False
        self.messages.append(message)
        return True

    async def load_peers(self) -> None:
        self.is_peers_loading = True
        try:
            self.peers = await self._api.list_peers()
        except ChatSyncError as exc:
            logger.info("list_peers failed: %s", exc.detail)
            self._notifier.notify(NoticeKind.ERROR, user_message(exc, PEERS_FAILED))
        finally:
            self.is_peers_loading = False

    async def select_conversation(self, peer_id: str | None) -> None:
        self.unsubscribe()
        self._generation += 1
        self.selected_peer_id = peer_id
        self.messages = []
        self.is_messages_loading = False
        if peer_id is None:
            return
        self.subscribe()
        await self.fetch_history(peer_id)

    async def fetch_history(self, peer_id: str) -> None:
        generation = self._generation
        self.is_messages_loading = True
        try:
            history = await self._api.fetch_history(peer_id)
        except ChatSyncError as exc:
            if self._is_current(generation, peer_id):
                logger.info("fetch_history(%s) failed: %s", peer_id, exc.detail)
                self._notifier.notify(NoticeKind.ERROR, user_message(exc, HISTORY_FAILED))
            return
        finally:
            if generation == self._generation:
                self.is_messages_loading = False

        if not self._is_current(generation, peer_id):
            logger.debug("Discarding stale history for %s", peer_id)
            return
        # Keep anything pushed while the fetch was in flight.
        pushed = self.messages
        self.messages = list(history)
        for message in pushed:
            self._append(message)

    async def send_message(self, payload: OutgoingMessage) -> Message | None:
        peer_id = self.selected_peer_id
        if peer_id is None:
            logger.warning("send_message() with no conversation selected")
            return None
        generation = self._generation
        try:
            message = await self._api.send_message(peer_id, payload)
        except ChatSyncError as exc:
            logger.info("send_message to %s failed: %s", peer_id, exc.detail)
            self._notifier.notify(NoticeKind.ERROR, user_message(exc, SEND_FAILED))
            return None

        if self._is_current(generation, peer_id):
            self._append(message)
        return message

    def subscribe(self) -> None:
        if self.selected_peer_id is None:
            return
        self._subscribed = self._connections.attach_listener(
            MESSAGE_RECEIVED, self._on_message_received,
        )

    def unsubscribe(self) -> None:
        if self._subscribed:
            self._connections.detach_listener(MESSAGE_RECEIVED)
            self._subscribed = False

    def _on_message_received(self, payload: Any) -> None:
        try:
            message = message_to_entity(MessageReceived.model_validate(payload))
        except ValidationError:
            logger.warning("Dropping malformed message event: %r", payload)
            return
        if message.sender_id != self.selected_peer_id:
            return
        self._append(message)
