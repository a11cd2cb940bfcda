from __future__ import annotations

import logging
from typing import Protocol

from chat_sync.domain.value_objects.enums import NoticeKind

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, kind: NoticeKind, text: str) -> None: ...


class LoggingNotifier:
    """Default sink: writes user-facing notices to the log."""

    def notify(self, kind: NoticeKind, text: str) -> None:
        if kind == NoticeKind.ERROR:
            logger.warning("notice[%s]: %s", kind, text)
        else:
            logger.info("notice[%s]: %s", kind, text)
