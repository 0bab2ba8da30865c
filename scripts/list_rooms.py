"""Smoke-check a VLG server: list open rooms and report health signals.

Reads the usual `VLG_*` settings (and `.env`), e.g.

    VLG_BASE_URL=https://example.com/vlg/ uv run python scripts/list_rooms.py

Exit code is 0 when the room list was fetched, 1 otherwise.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

from vlg_client.api.actions import ApiError
from vlg_client.client import open_client
from vlg_client.config import configure_logging, settings_from_env
from vlg_client.core.health import HealthSignal

logger = logging.getLogger("list_rooms")


async def _main() -> int:
    settings = settings_from_env()
    configure_logging(settings)

    async with open_client(settings) as client:
        def _on_signal(signal: HealthSignal) -> None:
            logger.warning("health signal: %s", signal.value)

        client.bus.subscribe(_on_signal)
        logger.info("server %s, device class %s", settings.base_url, client.executor.device_class.value)

        try:
            rooms = await client.api.list_rooms()
        except ApiError as e:
            logger.error("listRooms failed (%s): %s", e.kind.value, e.message)
            return 1

    print(json.dumps(rooms, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(_main()))
