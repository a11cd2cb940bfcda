from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    """Payload of a locally composed message. At least one field is set."""

    text: str | None = None
    media_ref: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.media_ref
