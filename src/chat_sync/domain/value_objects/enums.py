from __future__ import annotations

from enum import StrEnum


class SessionPhase(StrEnum):
    UNCHECKED = "unchecked"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class PendingOp(StrEnum):
    NONE = "none"
    SIGNING_UP = "signing_up"
    LOGGING_IN = "logging_in"
    UPDATING_PROFILE = "updating_profile"


class ConnectionStatus(StrEnum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class NoticeKind(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
