"""aiohttp implementation of the ``ChatApi`` port."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, TypeVar
from urllib.parse import quote

import aiohttp
from pydantic import BaseModel, ValidationError

from chat_sync.application.dto.credentials import LogInData, ProfilePatch, SignUpData
from chat_sync.application.dto.message import OutgoingMessage
from chat_sync.application.exceptions import (
    ChatSyncError,
    NotAuthorizedError,
    TransportError,
    ValidationOrConflictError,
)
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import UserIdentity
from chat_sync.infrastructure.http.correlation import HEADER, current_correlation_id
from chat_sync.infrastructure.http.mappers import message_to_entity, user_to_entity
from chat_sync.infrastructure.http.schemas import (
    ErrorPayload,
    LogInRequest,
    MessageWire,
    SendMessageRequest,
    SignUpRequest,
    UpdateProfileRequest,
    UserWire,
)

logger = logging.getLogger(__name__)

W = TypeVar("W", bound=BaseModel)


def _decode(raw: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def error_for_status(status: int, data: Any) -> ChatSyncError:
    """Map a failed response onto the error taxonomy."""
    detail = ""
    if isinstance(data, dict):
        try:
            detail = ErrorPayload.model_validate(data).message or ""
        except ValidationError:
            detail = ""
    if status == 401:
        return NotAuthorizedError(detail, status)
    if 400 <= status < 500:
        return ValidationOrConflictError(detail, status)
    return TransportError(detail, status)


def _parse(model: type[W], data: Any) -> W:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TransportError(f"Unexpected {model.__name__} payload") from exc


def _parse_list(model: type[W], data: Any) -> list[W]:
    if not isinstance(data, list):
        raise TransportError(f"Expected a list of {model.__name__}")
    return [_parse(model, item) for item in data]


class HttpChatApi:
    """Cookie-authenticated JSON client for the chat backend."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                cookie_jar=aiohttp.CookieJar(unsafe=True),
            )
            self._owns_session = True
        return self._session

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(
        self,
        method: str,
        path: str,
        body: BaseModel | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        headers = {HEADER: current_correlation_id()}
        payload = body.model_dump(by_alias=True, exclude_none=True) if body is not None else None
        try:
            async with self._get_session().request(
                method, url, json=payload, headers=headers,
            ) as resp:
                status = resp.status
                raw = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("%s %s failed", method, path, exc_info=True)
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        data = _decode(raw)
        if status >= 400:
            logger.debug("%s %s -> %d", method, path, status)
            raise error_for_status(status, data)
        return data

    async def probe_session(self) -> UserIdentity:
        data = await self._request("GET", "/auth/check")
        return user_to_entity(_parse(UserWire, data))

    async def sign_up(self, data: SignUpData) -> UserIdentity:
        body = SignUpRequest(full_name=data.display_name, email=data.email, password=data.password)
        resp = await self._request("POST", "/auth/signup", body)
        return user_to_entity(_parse(UserWire, resp))

    async def log_in(self, data: LogInData) -> UserIdentity:
        body = LogInRequest(email=data.email, password=data.password)
        resp = await self._request("POST", "/auth/login", body)
        return user_to_entity(_parse(UserWire, resp))

    async def log_out(self) -> None:
        await self._request("POST", "/auth/logout")

    async def update_profile(self, patch: ProfilePatch) -> UserIdentity:
        body = UpdateProfileRequest(profile_pic=patch.avatar_ref)
        resp = await self._request("PUT", "/auth/update-profile", body)
        return user_to_entity(_parse(UserWire, resp))

    async def list_peers(self) -> list[UserIdentity]:
        data = await self._request("GET", "/messages/users")
        return [user_to_entity(u) for u in _parse_list(UserWire, data)]

    async def fetch_history(self, peer_id: str) -> list[Message]:
        data = await self._request("GET", f"/messages/{quote(peer_id, safe='')}")
        return [message_to_entity(m) for m in _parse_list(MessageWire, data)]

    async def send_message(self, peer_id: str, payload: OutgoingMessage) -> Message:
        body = SendMessageRequest(text=payload.text, image=payload.media_ref)
        resp = await self._request("POST", f"/messages/send/{quote(peer_id, safe='')}", body)
        return message_to_entity(_parse(MessageWire, resp))
