"""Wire models for the chat HTTP API."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UserWire(_Wire):
    id: str = Field(alias="_id")
    full_name: str = Field(default="", alias="fullName")
    email: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")
    profile_pic: str | None = Field(default=None, alias="profilePic")


class MessageWire(_Wire):
    id: str = Field(alias="_id")
    sender_id: str = Field(alias="senderId")
    receiver_id: str | None = Field(default=None, alias="receiverId")
    text: str | None = None
    image: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")


class ErrorPayload(_Wire):
    message: str | None = None


class SignUpRequest(_Wire):
    full_name: str = Field(alias="fullName")
    email: str
    password: str


class LogInRequest(_Wire):
    email: str
    password: str


class UpdateProfileRequest(_Wire):
    profile_pic: str = Field(alias="profilePic")


class SendMessageRequest(_Wire):
    text: str | None = None
    image: str | None = None
