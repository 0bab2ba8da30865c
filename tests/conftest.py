from __future__ import annotations

import asyncio
import json
import os
from collections.abc import AsyncGenerator, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Request, Response

from vlg_client.core.cancellation import ComposedCancellation
from vlg_client.core.device import DeviceClass, TimeoutPolicy
from vlg_client.core.executor import RequestExecutor
from vlg_client.core.health import HealthSignal, HealthSignalBus
from vlg_client.infra.http_transport import HttpxTransport, create_http_client

BASE_URL = "http://testserver/vlg/"

# Scaled-down policy so timeout tests run in milliseconds.
FAST_POLICY = TimeoutPolicy(standard_s=0.2, constrained_s=0.4)


@pytest.fixture(autouse=True)
def _isolate_vlg_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests hermetic: a developer's VLG_* exports must not leak into settings."""

    for name in list(os.environ):
        if name.startswith("VLG_"):
            monkeypatch.delenv(name, raising=False)


@dataclass
class StubReply:
    status: int = 200
    body: str = '{"ok": true}'
    delay_s: float = 0.0


@dataclass
class RecordedCall:
    method: str
    action: str
    body: Any
    headers: dict[str, str]


@dataclass
class StubServer:
    """Stand-in for the game server's `api.php`, replies configured per action."""

    replies: dict[str, StubReply] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)

    def reply(self, action: str, *, status: int = 200, body: str = '{"ok": true}', delay_s: float = 0.0) -> None:
        self.replies[action] = StubReply(status=status, body=body, delay_s=delay_s)

    def build_app(self) -> FastAPI:
        app = FastAPI(title="vlg-stub")

        @app.api_route("/vlg/api.php", methods=["GET", "POST"])
        async def _api(request: Request, action: str) -> Response:
            raw = await request.body()
            self.calls.append(
                RecordedCall(
                    method=request.method,
                    action=action,
                    body=json.loads(raw) if raw else None,
                    headers=dict(request.headers),
                )
            )
            reply = self.replies.get(action, StubReply())
            if reply.delay_s:
                await asyncio.sleep(reply.delay_s)
            return Response(content=reply.body, status_code=reply.status, media_type="application/json")

        return app


@pytest.fixture()
def stub_server() -> StubServer:
    return StubServer()


@pytest.fixture()
def bus() -> HealthSignalBus:
    return HealthSignalBus()


@pytest.fixture()
def signals(bus: HealthSignalBus) -> list[HealthSignal]:
    received: list[HealthSignal] = []
    bus.subscribe(received.append)
    return received


@pytest.fixture()
async def make_executor(
    stub_server: StubServer, bus: HealthSignalBus
) -> AsyncGenerator[Callable[..., RequestExecutor], None]:
    transports: list[HttpxTransport] = []
    app = stub_server.build_app()

    def _make(*, device_class: DeviceClass = DeviceClass.standard, policy: TimeoutPolicy = FAST_POLICY) -> RequestExecutor:
        transport = HttpxTransport(create_http_client(transport=httpx.ASGITransport(app=app)))
        transports.append(transport)
        return RequestExecutor(transport, base_url=BASE_URL, device_class=device_class, bus=bus, policy=policy)

    yield _make

    for transport in transports:
        await transport.aclose()


@pytest.fixture()
def composed_scopes(monkeypatch: pytest.MonkeyPatch) -> list[ComposedCancellation]:
    """Record every cancellation scope the executor opens."""

    import vlg_client.core.executor as ex

    scopes: list[ComposedCancellation] = []
    real = ex.compose_cancellation

    @contextmanager
    def _recording(*args: Any, **kwargs: Any) -> Iterator[ComposedCancellation]:
        with real(*args, **kwargs) as scope:
            scopes.append(scope)
            yield scope

    monkeypatch.setattr(ex, "compose_cancellation", _recording)
    return scopes
