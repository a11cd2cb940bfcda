from __future__ import annotations

from dataclasses import dataclass

from chat_sync.domain.entities.user import UserIdentity
from chat_sync.domain.value_objects.enums import PendingOp, SessionPhase


@dataclass(slots=True)
class Session:
    """Process-wide record of whether, and as whom, the local user is authenticated.

    Mutated only by ``SessionManager``.
    """

    identity: UserIdentity | None = None
    phase: SessionPhase = SessionPhase.UNCHECKED
    pending_op: PendingOp = PendingOp.NONE
    is_checking: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.phase == SessionPhase.AUTHENTICATED and self.identity is not None

    def reset(self) -> None:
        self.identity = None
        self.phase = SessionPhase.UNAUTHENTICATED
