from __future__ import annotations

import json
import logging

from vlg_client.core.cancellation import compose_cancellation
from vlg_client.core.device import DeviceClass, TimeoutPolicy
from vlg_client.core.errors import (
    CancelledFailure,
    ConnectionFailure,
    DecodeFailure,
    RawFailure,
    StatusFailure,
    TransportCancelled,
    TransportFailure,
    classify_failure,
    describe_failure,
    failure_status,
    health_signal_for,
)
from vlg_client.core.health import HealthSignalBus
from vlg_client.core.lifecycle import RequestLifecycle
from vlg_client.core.models import Failure, Outcome, RequestDescriptor, Success, resolve_url
from vlg_client.core.transport import Transport, TransportRequest

logger = logging.getLogger(__name__)


class RequestExecutor:
    """Delivers one request and normalizes whatever happens into an `Outcome`.

    The timeout is sized once per request from the injected device class. A
    timeout is reported as `service_unavailable` and published on the bus; a
    caller cancellation is reported as `cancelled` and is not.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        base_url: str,
        device_class: DeviceClass,
        bus: HealthSignalBus,
        policy: TimeoutPolicy | None = None,
    ) -> None:
        self._transport = transport
        self._base_url = base_url
        self._device_class = device_class
        self._bus = bus
        self._policy = policy or TimeoutPolicy()

    @property
    def device_class(self) -> DeviceClass:
        return self._device_class

    async def execute(self, descriptor: RequestDescriptor) -> Outcome:
        url = resolve_url(self._base_url, descriptor.path)
        timeout_s = self._policy.duration_for(self._device_class)
        request = TransportRequest(
            method=descriptor.method.upper(),
            url=url,
            headers=dict(descriptor.headers),
            body=descriptor.body,
        )

        def _on_timeout() -> None:
            logger.debug("%s %s timed out after %.1fs", request.method, url, timeout_s)
            lifecycle.mark_timed_out()

        with compose_cancellation(descriptor.cancel, timeout_s=timeout_s, on_timeout=_on_timeout) as scope:
            lifecycle = RequestLifecycle(release=scope.release)
            try:
                if scope.token.cancelled:
                    return self._fail(CancelledFailure(timed_out=scope.timed_out))

                lifecycle.begin()
                logger.debug("%s %s (timeout %.1fs)", request.method, url, timeout_s)
                try:
                    response = await self._transport.send(request, cancel=scope.token)
                except TransportCancelled:
                    return self._fail(CancelledFailure(timed_out=scope.timed_out))
                except TransportFailure as e:
                    return self._fail(ConnectionFailure(message=str(e)))

                if not response.ok:
                    return self._fail(
                        StatusFailure(status=response.status_code, reason=response.reason_phrase, body=response.text)
                    )

                try:
                    value = json.loads(response.text)
                except ValueError:
                    return self._fail(DecodeFailure(body=response.text))
                return Success(value)
            finally:
                lifecycle.settle()

    def _fail(self, raw: RawFailure) -> Failure:
        kind = classify_failure(raw)
        failure = Failure(kind=kind, message=describe_failure(raw), status=failure_status(raw))

        signal = health_signal_for(kind)
        if signal is not None:
            logger.warning("request failed (%s): %s", kind.value, failure.message)
            self._bus.publish(signal)
        else:
            logger.debug("request failed (%s): %s", kind.value, failure.message)
        return failure
