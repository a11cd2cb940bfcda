"""Realtime event names and inbound payload models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from chat_sync.infrastructure.http.schemas import MessageWire

PRESENCE_SNAPSHOT = "getOnlineUsers"
MESSAGE_RECEIVED = "newMessage"

UNAUTHORIZED = "unauthorized"


class PresenceSnapshot(BaseModel):
    """Server → Client: everyone currently online."""

    ids: list[str]
    seq: int | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> PresenceSnapshot:
        if isinstance(payload, (list, tuple)):
            return cls.model_validate({"ids": list(payload)})
        return cls.model_validate(payload)


class MessageReceived(MessageWire):
    """Server → Client: a message pushed to the recipient."""


def is_unauthorized(data: Any) -> bool:
    """Whether a ``connect_error`` payload signals a rejected credential."""
    if isinstance(data, dict):
        data = data.get("message")
    return isinstance(data, str) and data.strip().lower() == UNAUTHORIZED
