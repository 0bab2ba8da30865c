from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import StrEnum
from typing import Any


class CancelReason(StrEnum):
    caller = "caller"
    timeout = "timeout"


CancelCallback = Callable[["CancelToken"], None]


class CancelToken:
    """Cooperative cancellation handle.

    The first `cancel()` wins: it records the reason, wakes waiters and runs the
    registered callbacks once. Later calls are no-ops and return False.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Any = None
        self._callbacks: list[CancelCallback] = []
        self._event: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Any:
        return self._reason

    def cancel(self, reason: Any = None) -> bool:
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)
        return True

    def add_callback(self, callback: CancelCallback) -> Callable[[], None]:
        """Run `callback` once on cancellation; returns a detach function.

        If the token is already cancelled the callback runs immediately.
        """

        if self._cancelled:
            callback(self)
            return lambda: None

        self._callbacks.append(callback)

        def _detach() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return _detach

    async def wait(self) -> None:
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()


class ComposedCancellation:
    """Effective token merged from an optional caller token and a timer.

    `reason` tells which source fired first; only `CancelReason.timeout` counts
    as a systemic timeout.
    """

    def __init__(self) -> None:
        self.token = CancelToken()
        self._timer: asyncio.TimerHandle | None = None
        self._detach: Callable[[], None] | None = None

    @property
    def reason(self) -> CancelReason | None:
        if not self.token.cancelled:
            return None
        return self.token.reason

    @property
    def timed_out(self) -> bool:
        return self.token.reason is CancelReason.timeout

    @property
    def armed(self) -> bool:
        return self._timer is not None

    def arm(
        self,
        external: CancelToken | None,
        timeout_s: float,
        on_timeout: Callable[[], None] | None = None,
    ) -> None:
        """Follow `external` and start the timer. Must run inside an event loop."""

        loop = asyncio.get_running_loop()
        if external is not None:
            if external.cancelled:
                self.token.cancel(CancelReason.caller)
            else:
                self._detach = external.add_callback(self._on_caller_cancel)
        self._timer = loop.call_later(timeout_s, self._expire, on_timeout)

    def release(self) -> None:
        """Disarm the timer and detach from the caller token. Idempotent."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._detach is not None:
            self._detach()
            self._detach = None

    def _on_caller_cancel(self, _token: CancelToken) -> None:
        self.token.cancel(CancelReason.caller)

    def _expire(self, on_timeout: Callable[[], None] | None) -> None:
        self._timer = None
        if self.token.cancel(CancelReason.timeout) and on_timeout is not None:
            on_timeout()


@contextmanager
def compose_cancellation(
    external: CancelToken | None,
    *,
    timeout_s: float,
    on_timeout: Callable[[], None] | None = None,
) -> Iterator[ComposedCancellation]:
    """Compose a caller token with a timeout for the duration of the block.

    Both the caller subscription and the timer exist before the block body runs,
    so a caller that cancelled up front is seen immediately. Everything is
    released when the block exits, however it exits.
    """

    composed = ComposedCancellation()
    composed.arm(external, timeout_s, on_timeout)
    try:
        yield composed
    finally:
        composed.release()
