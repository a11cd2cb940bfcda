from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    sender_id: str
    recipient_id: str | None
    text: str | None
    media_ref: str | None
    created_at: datetime | None
