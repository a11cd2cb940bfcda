from __future__ import annotations

from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import UserIdentity
from chat_sync.infrastructure.http.schemas import MessageWire, UserWire


def user_to_entity(wire: UserWire) -> UserIdentity:
    return UserIdentity(
        id=wire.id,
        display_name=wire.full_name,
        email=wire.email,
        created_at=wire.created_at,
        avatar_ref=wire.profile_pic,
    )


def message_to_entity(wire: MessageWire) -> Message:
    return Message(
        id=wire.id,
        sender_id=wire.sender_id,
        recipient_id=wire.receiver_id,
        text=wire.text,
        media_ref=wire.image,
        created_at=wire.created_at,
    )
