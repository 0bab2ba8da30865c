from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

logger = logging.getLogger(__name__)


class HealthSignal(StrEnum):
    service_unavailable = "service-unavailable"
    server_error = "server-error"


HealthSubscriber = Callable[[HealthSignal], None]


class HealthSignalBus:
    """In-process publish point for systemic service degradation.

    Contract:
      - presentation code attaches with `subscribe(callback)` and detaches with the
        returned callable (or `unsubscribe(callback)`).
      - the executor calls `publish(signal)`; delivery is synchronous, fire-and-forget.

    Subscribers only see signals published while attached. Nothing is queued,
    deduplicated or remembered.
    """

    def __init__(self) -> None:
        self._subscribers: list[HealthSubscriber] = []

    def subscribe(self, callback: HealthSubscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: HealthSubscriber) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def publish(self, signal: HealthSignal) -> None:
        for callback in list(self._subscribers):
            try:
                callback(signal)
            except Exception:
                logger.exception("health subscriber %r failed on %s", callback, signal.value)
