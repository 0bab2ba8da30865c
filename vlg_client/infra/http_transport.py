from __future__ import annotations

import asyncio

import httpx

from vlg_client.core.cancellation import CancelToken
from vlg_client.core.errors import TransportCancelled, TransportFailure
from vlg_client.core.transport import TransportRequest, TransportResponse


def create_http_client(*, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    # No httpx-level deadline: the executor's timeout policy owns request duration.
    return httpx.AsyncClient(timeout=httpx.Timeout(None), transport=transport)


class HttpxTransport:
    """`Transport` backed by an `httpx.AsyncClient`.

    The exchange (send + full body read) runs as its own task raced against the
    cancel token. When the token wins, the task is cancelled and awaited so the
    connection is torn down before `TransportCancelled` is raised.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, request: TransportRequest, *, cancel: CancelToken) -> TransportResponse:
        if cancel.cancelled:
            raise TransportCancelled("cancelled before dispatch")

        exchange = asyncio.ensure_future(self._exchange(request))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({exchange, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            exchange.cancel()
            await asyncio.gather(exchange, return_exceptions=True)
            raise
        finally:
            waiter.cancel()

        if exchange.done():
            return exchange.result()

        exchange.cancel()
        await asyncio.gather(exchange, return_exceptions=True)
        raise TransportCancelled("cancelled in flight")

    async def _exchange(self, request: TransportRequest) -> TransportResponse:
        try:
            response = await self._client.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
        except httpx.RequestError as e:
            raise TransportFailure(str(e) or type(e).__name__) from e

        return TransportResponse(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            text=response.text,
        )
