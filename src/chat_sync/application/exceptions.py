from __future__ import annotations


class ChatSyncError(Exception):
    """Base error for failed outbound calls and connection failures."""

    def __init__(self, detail: str = "", status: int | None = None) -> None:
        self.detail = detail
        self.status = status
        super().__init__(detail)


class NotAuthorizedError(ChatSyncError):
    """The credential is missing, expired or rejected. Collapses the session."""


class ConnectionAuthError(NotAuthorizedError):
    """Authorization rejected at the realtime transport layer."""


class ValidationOrConflictError(ChatSyncError):
    """The server refused the request with a message meant for the user."""


class TransportError(ChatSyncError):
    """Network failure, server error or an undecodable response."""


def user_message(exc: ChatSyncError, fallback: str) -> str:
    """Text to show the user for a failed call.

    Only server-provided text from a structured error payload is surfaced;
    transport failures always fall back to the generic message.
    """
    if isinstance(exc, TransportError):
        return fallback
    return exc.detail or fallback
