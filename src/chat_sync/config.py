from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_BASE_URL: str = "http://localhost:5001/api"

    SOCKET_URL: str = "http://localhost:5001"
    SOCKET_PATH: str = "socket.io"
    SOCKET_TRANSPORTS: list[str] = ["websocket", "polling"]
    SOCKET_RECONNECTION: bool = True

    REQUEST_TIMEOUT_SECONDS: float = 15.0
    CONNECT_TIMEOUT_SECONDS: float = 10.0

    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=".env",
        env_prefix="CHAT_SYNC_",
        extra="ignore",
    )


settings = Settings()
