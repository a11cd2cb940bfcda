from __future__ import annotations

import logging

from chat_sync.application.dto.credentials import LogInData, ProfilePatch, SignUpData
from chat_sync.application.exceptions import ChatSyncError, NotAuthorizedError, user_message
from chat_sync.application.ports.api import ChatApi
from chat_sync.application.ports.notifier import Notifier
from chat_sync.domain.entities.session import Session
from chat_sync.domain.entities.user import UserIdentity
from chat_sync.domain.value_objects.enums import NoticeKind, PendingOp, SessionPhase
from chat_sync.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

SIGN_UP_OK = "Account created successfully"
SIGN_UP_FAILED = "Failed to create account"
LOG_IN_FAILED = "Invalid credentials"
LOG_OUT_OK = "Logged out successfully"
LOG_OUT_FAILED = "Error logging out"
PROFILE_OK = "Profile updated successfully"
PROFILE_FAILED = "Failed to update profile"
SESSION_EXPIRED = "Session expired. Please log in again."


class SessionManager:
    """Authenticated-identity state machine.

    Every transition to AUTHENTICATED opens the connection and every
    transition to UNAUTHENTICATED tears it down. Failed calls are handled
    here: callers only observe ``session`` and the notifier.
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
        self.session = Session()

    @property
    def identity(self) -> UserIdentity | None:
        return self.session.identity

    @property
    def phase(self) -> SessionPhase:
        return self.session.phase

    async def check_session(self) -> None:
        if self.session.phase not in (SessionPhase.UNCHECKED, SessionPhase.UNAUTHENTICATED):
            logger.debug("check_session() in phase %s, ignoring", self.session.phase)
            return
        self.session.phase = SessionPhase.CHECKING
        self.session.is_checking = True
        try:
            identity = await self._api.probe_session()
        except NotAuthorizedError:
            logger.info("No authenticated session")
            self.session.reset()
        except ChatSyncError as exc:
            logger.error("Error in check_session: %s", exc.detail or exc.__class__.__name__)
            self.session.phase = SessionPhase.UNAUTHENTICATED
        else:
            await self._authenticate(identity)
        finally:
            self.session.pending_op = PendingOp.NONE
            self.session.is_checking = False

    async def sign_up(self, data: SignUpData) -> bool:
        self.session.pending_op = PendingOp.SIGNING_UP
        try:
            identity = await self._api.sign_up(data)
        except ChatSyncError as exc:
            logger.info("Sign-up failed: %s", exc.detail)
            self._notifier.notify(NoticeKind.ERROR, user_message(exc, SIGN_UP_FAILED))
            return False
        finally:
            self.session.pending_op = PendingOp.NONE
        self._notifier.notify(NoticeKind.SUCCESS, SIGN_UP_OK)
        await self._authenticate(identity)
        return self.session.is_authenticated

    async def log_in(self, data: LogInData) -> bool:
        self.session.pending_op = PendingOp.LOGGING_IN
        try:
            identity = await self._api.log_in(data)
        except ChatSyncError as exc:
            logger.info("Log-in failed: %s", exc.detail)
            self._notifier.notify(NoticeKind.ERROR, user_message(exc, LOG_IN_FAILED))
            return False
        finally:
            self.session.pending_op = PendingOp.NONE
        await self._authenticate(identity)
        return self.session.is_authenticated

    async def update_profile(self, patch: ProfilePatch) -> bool:
        self.session.pending_op = PendingOp.UPDATING_PROFILE
        try:
            identity = await self._api.update_profile(patch)
        except NotAuthorizedError:
            self.session.pending_op = PendingOp.NONE
            await self.log_out(quiet=True)
            self._notifier.notify(NoticeKind.ERROR, SESSION_EXPIRED)
            return False
        except ChatSyncError as exc:
            logger.info("Profile update failed: %s", exc.detail)
            self._notifier.notify(NoticeKind.ERROR, user_message(exc, PROFILE_FAILED))
            return False
        finally:
            self.session.pending_op = PendingOp.NONE
        self.session.identity = identity
        self._notifier.notify(NoticeKind.SUCCESS, PROFILE_OK)
        await self._check_binding()
        return True

    async def log_out(self, *, quiet: bool = False) -> None:
        """End the session locally whatever the remote call returns."""
        try:
            await self._api.log_out()
        except ChatSyncError as exc:
            logger.warning("Remote logout failed: %s", exc.detail or exc.__class__.__name__)
            if not quiet:
                self._notifier.notify(NoticeKind.ERROR, user_message(exc, LOG_OUT_FAILED))
        else:
            if not quiet:
                self._notifier.notify(NoticeKind.SUCCESS, LOG_OUT_OK)
        finally:
            self.session.reset()
            await self._connections.disconnect()

    async def _authenticate(self, identity: UserIdentity) -> None:
        previous = self.session.identity
        if previous is not None and previous.id != identity.id:
            await self._connections.disconnect()
        self.session.identity = identity
        self.session.phase = SessionPhase.AUTHENTICATED
        await self._connections.connect()
        await self._check_binding()

    async def _check_binding(self) -> None:
        identity = self.session.identity
        if not self.session.is_authenticated or identity is None:
            return
        conn = self._connections.connection
        if conn is not None and conn.identity_id != identity.id:
            logger.error(
                "Connection bound to %s while session is %s, reconnecting",
                conn.identity_id, identity.id,
            )
            await self._connections.connect()
