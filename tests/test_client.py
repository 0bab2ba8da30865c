from __future__ import annotations

import httpx
import pytest

from vlg_client.api.actions import ApiError
from vlg_client.client import open_client
from vlg_client.config import Settings
from vlg_client.core.device import DeviceClass, EnvironmentProbe, TimeoutPolicy
from vlg_client.core.errors import ErrorKind
from vlg_client.core.health import HealthSignal, HealthSignalBus

IPHONE = EnvironmentProbe(user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148")


async def test_open_client_wires_device_class_and_bus(stub_server) -> None:
    stub_server.reply("listGallery", body='{"ok":true,"images":["a.png"]}')
    settings = Settings(base_url="http://testserver/vlg/", probe=IPHONE)

    async with open_client(settings, http_transport=httpx.ASGITransport(app=stub_server.build_app())) as client:
        assert client.executor.device_class is DeviceClass.constrained
        assert await client.api.list_gallery() == {"ok": True, "images": ["a.png"]}


async def test_shared_bus_sees_timeouts(stub_server) -> None:
    stub_server.reply("listRooms", delay_s=1.0)
    bus = HealthSignalBus()
    received: list[HealthSignal] = []
    bus.subscribe(received.append)
    settings = Settings(
        base_url="http://testserver/vlg/",
        timeout_policy=TimeoutPolicy(standard_s=0.1, constrained_s=0.2),
    )

    async with open_client(settings, bus=bus, http_transport=httpx.ASGITransport(app=stub_server.build_app())) as client:
        assert client.bus is bus
        with pytest.raises(ApiError) as excinfo:
            await client.api.list_rooms()

    assert excinfo.value.kind is ErrorKind.service_unavailable
    assert received == [HealthSignal.service_unavailable]
