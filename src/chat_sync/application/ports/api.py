from __future__ import annotations

from typing import Protocol

from chat_sync.application.dto.credentials import LogInData, ProfilePatch, SignUpData
from chat_sync.application.dto.message import OutgoingMessage
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import UserIdentity


class ChatApi(Protocol):
    """Request/response collaborator. Failures raise ``ChatSyncError`` subclasses."""

    async def probe_session(self) -> UserIdentity: ...
    async def sign_up(self, data: SignUpData) -> UserIdentity: ...
    async def log_in(self, data: LogInData) -> UserIdentity: ...
    async def log_out(self) -> None: ...
    async def update_profile(self, patch: ProfilePatch) -> UserIdentity: ...
    async def list_peers(self) -> list[UserIdentity]: ...
    async def fetch_history(self, peer_id: str) -> list[Message]: ...
    async def send_message(self, peer_id: str, payload: OutgoingMessage) -> Message: ...
