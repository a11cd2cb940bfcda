"""Entrypoint: python -m chat_sync"""
from __future__ import annotations

import asyncio
import logging

from chat_sync.app import create_client
from chat_sync.config import settings

logger = logging.getLogger(__name__)

POLL_SECONDS = 1.0


async def run() -> None:
    client = create_client(settings)
    await client.startup()
    if client.session.identity is None:
        logger.info("Not signed in, nothing to watch")
        await client.shutdown()
        return

    seen: frozenset[str] = frozenset()
    try:
        while client.session.identity is not None:
            if client.presence.online != seen:
                seen = client.presence.online
                logger.info("Online: %s", ", ".join(sorted(seen)) or "-")
            await asyncio.sleep(POLL_SECONDS)
    finally:
        await client.shutdown()


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
