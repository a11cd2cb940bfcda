from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserIdentity:
    id: str
    display_name: str
    email: str
    created_at: datetime | None
    avatar_ref: str | None
