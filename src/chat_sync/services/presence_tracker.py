from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from chat_sync.infrastructure.realtime.protocol import PresenceSnapshot

logger = logging.getLogger(__name__)


class PresenceTracker:
    """Set of currently online peer ids, replaced wholesale on every snapshot."""

    def __init__(self) -> None:
        self._online: frozenset[str] = frozenset()
        self._last_seq: int | None = None

    @property
    def online(self) -> frozenset[str]:
        return self._online

    def is_online(self, user_id: str) -> bool:
        return user_id in self._online

    def apply_snapshot(self, payload: Any) -> None:
        """Handle an inbound presence snapshot.

        The payload is either a bare list of ids or ``{"ids": [...], "seq": n}``.
        Sequenced snapshots older than the last applied one are discarded;
        bare lists are always applied.
        """
        try:
            snapshot = PresenceSnapshot.from_payload(payload)
        except ValidationError:
            logger.warning("Dropping malformed presence snapshot: %r", payload)
            return

        if snapshot.seq is not None:
            if self._last_seq is not None and snapshot.seq <= self._last_seq:
                logger.debug(
                    "Dropping stale presence snapshot seq=%d (last=%d)",
                    snapshot.seq, self._last_seq,
                )
                return
            self._last_seq = snapshot.seq

        self._online = frozenset(snapshot.ids)
        logger.debug("Presence replaced: %d online", len(self._online))

    def clear(self) -> None:
        self._online = frozenset()
        self._last_seq = None
