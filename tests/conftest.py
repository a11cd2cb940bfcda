"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from chat_sync.app import ChatClient
from chat_sync.application.dto.credentials import LogInData, ProfilePatch, SignUpData
from chat_sync.application.dto.message import OutgoingMessage
from chat_sync.application.exceptions import ChatSyncError
from chat_sync.application.ports.realtime import CloseHandler, ErrorHandler, EventHandler
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import UserIdentity
from chat_sync.domain.value_objects.enums import ConnectionStatus, NoticeKind

ENDPOINT = "http://chat.test"

_ids = itertools.count(1)


def make_identity(user_id: str = "u1", *, name: str = "Alice", avatar: str | None = None) -> UserIdentity:
    return UserIdentity(
        id=user_id,
        display_name=name,
        email=f"{user_id}@example.com",
        created_at=datetime.now(timezone.utc),
        avatar_ref=avatar,
    )


def make_message(
    *,
    message_id: str | None = None,
    sender_id: str = "u2",
    recipient_id: str = "u1",
    text: str = "hello",
) -> Message:
    return Message(
        id=message_id or f"m{next(_ids)}",
        sender_id=sender_id,
        recipient_id=recipient_id,
        text=text,
        media_ref=None,
        created_at=datetime.now(timezone.utc),
    )


def wire_message(message: Message) -> dict[str, Any]:
    """Socket payload shape of a pushed message."""
    return {
        "_id": message.id,
        "senderId": message.sender_id,
        "receiverId": message.recipient_id,
        "text": message.text,
        "createdAt": message.created_at.isoformat() if message.created_at else None,
    }


@dataclass
class FakeChatApi:
    """In-memory API. Set an exception in ``errors`` to make a call fail."""

    identity: UserIdentity | None = None
    login_identity: UserIdentity = field(default_factory=make_identity)
    peers: list[UserIdentity] = field(default_factory=list)
    history: dict[str, list[Message]] = field(default_factory=dict)
    errors: dict[str, ChatSyncError] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[tuple[str, Any]] = field(default_factory=list)
    sent: list[tuple[str, OutgoingMessage]] = field(default_factory=list)

    async def _call(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        gate = self.gates.get(f"{name}:{arg}") or self.gates.get(name)
        if gate is not None:
            await gate.wait()
        error = self.errors.get(name)
        if error is not None:
            raise error

    async def probe_session(self) -> UserIdentity:
        await self._call("probe_session")
        if self.identity is None:
            raise AssertionError("probe_session without identity or error configured")
        return self.identity

    async def sign_up(self, data: SignUpData) -> UserIdentity:
        await self._call("sign_up", data)
        return self.login_identity

    async def log_in(self, data: LogInData) -> UserIdentity:
        await self._call("log_in", data)
        return self.login_identity

    async def log_out(self) -> None:
        await self._call("log_out")

    async def update_profile(self, patch: ProfilePatch) -> UserIdentity:
        await self._call("update_profile", patch)
        current = self.login_identity
        return UserIdentity(
            id=current.id,
            display_name=current.display_name,
            email=current.email,
            created_at=current.created_at,
            avatar_ref=patch.avatar_ref,
        )

    async def list_peers(self) -> list[UserIdentity]:
        await self._call("list_peers")
        return list(self.peers)

    async def fetch_history(self, peer_id: str) -> list[Message]:
        await self._call("fetch_history", peer_id)
        return list(self.history.get(peer_id, []))

    async def send_message(self, peer_id: str, payload: OutgoingMessage) -> Message:
        await self._call("send_message", peer_id)
        self.sent.append((peer_id, payload))
        return make_message(sender_id="me", recipient_id=peer_id, text=payload.text or "")


@dataclass
class FakeConnection:
    endpoint: str
    identity_id: str
    _status: ConnectionStatus = ConnectionStatus.OPEN
    handlers: dict[str, list[EventHandler]] = field(default_factory=dict)
    error_handlers: list[ErrorHandler] = field(default_factory=list)
    close_handlers: list[CloseHandler] = field(default_factory=list)
    close_calls: int = 0

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def on(self, event: str, handler: EventHandler) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def off(self, event: str) -> None:
        self.handlers.pop(event, None)

    def on_error(self, handler: ErrorHandler) -> None:
        self.error_handlers.append(handler)

    def on_close(self, handler: CloseHandler) -> None:
        self.close_handlers.append(handler)

    async def close(self) -> None:
        self.close_calls += 1
        self._status = ConnectionStatus.CLOSED
        self.handlers.clear()

    def emit(self, event: str, data: Any) -> None:
        for handler in list(self.handlers.get(event, ())):
            handler(data)

    def fail(self, error: ChatSyncError) -> None:
        for handler in list(self.error_handlers):
            handler(error)

    def drop(self) -> None:
        """Lose the link the way a reconnecting socket does."""
        self._status = ConnectionStatus.CONNECTING
        for handler in list(self.close_handlers):
            handler()


@dataclass
class FakeTransport:
    error: ChatSyncError | None = None
    opened: list[FakeConnection] = field(default_factory=list)

    async def open(self, endpoint: str, identity_id: str) -> FakeConnection:
        if self.error is not None:
            raise self.error
        conn = FakeConnection(endpoint=endpoint, identity_id=identity_id)
        self.opened.append(conn)
        return conn


@dataclass
class RecordingNotifier:
    notices: list[tuple[NoticeKind, str]] = field(default_factory=list)

    def notify(self, kind: NoticeKind, text: str) -> None:
        self.notices.append((kind, text))

    @property
    def errors(self) -> list[str]:
        return [text for kind, text in self.notices if kind == NoticeKind.ERROR]

    @property
    def successes(self) -> list[str]:
        return [text for kind, text in self.notices if kind == NoticeKind.SUCCESS]


@pytest.fixture
def api() -> FakeChatApi:
    return FakeChatApi()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def client(api, transport, notifier) -> ChatClient:
    return ChatClient(api, transport, notifier, ENDPOINT)


async def logged_in(client: ChatClient) -> FakeConnection:
    """Log the client in and return its live connection."""
    assert await client.session.log_in(LogInData(email="a@example.com", password="pw"))
    conn = client.connections.connection
    assert conn is not None
    return conn
