"""Root conftest: pins client settings before any module imports."""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

# Tests never reach a real backend; keep reconnect loops out of stray sockets.
os.environ.setdefault("CHAT_SYNC_SOCKET_RECONNECTION", "false")
os.environ.setdefault("CHAT_SYNC_REQUEST_TIMEOUT_SECONDS", "5")
