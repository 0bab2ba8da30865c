from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from vlg_client.api.actions import GameApi
from vlg_client.config import Settings, settings_from_env
from vlg_client.core.device import DeviceClassifier
from vlg_client.core.executor import RequestExecutor
from vlg_client.core.health import HealthSignalBus
from vlg_client.infra.http_transport import HttpxTransport, create_http_client


@dataclass(frozen=True, slots=True)
class VlgClient:
    api: GameApi
    executor: RequestExecutor
    bus: HealthSignalBus


@asynccontextmanager
async def open_client(
    settings: Settings | None = None,
    *,
    bus: HealthSignalBus | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[VlgClient]:
    """Wire transport, device timing and bus into a ready-to-use client.

    The device class is computed here, once, and injected into the executor.
    Pass `bus` to share it with presentation code that subscribed beforehand.
    """

    cfg = settings or settings_from_env()
    device_class = DeviceClassifier(lambda: cfg.probe).classify()
    bus = bus or HealthSignalBus()

    transport = HttpxTransport(create_http_client(transport=http_transport))
    executor = RequestExecutor(
        transport,
        base_url=cfg.base_url,
        device_class=device_class,
        bus=bus,
        policy=cfg.timeout_policy,
    )
    try:
        yield VlgClient(api=GameApi(executor), executor=executor, bus=bus)
    finally:
        await transport.aclose()
