from __future__ import annotations

from vlg_client.core.health import HealthSignal, HealthSignalBus


def test_subscribers_receive_signals_while_attached() -> None:
    bus = HealthSignalBus()
    received: list[HealthSignal] = []
    unsubscribe = bus.subscribe(received.append)

    bus.publish(HealthSignal.server_error)
    unsubscribe()
    bus.publish(HealthSignal.service_unavailable)

    assert received == [HealthSignal.server_error]


def test_late_subscriber_sees_no_history() -> None:
    bus = HealthSignalBus()
    bus.publish(HealthSignal.service_unavailable)

    received: list[HealthSignal] = []
    bus.subscribe(received.append)
    assert received == []


def test_no_deduplication() -> None:
    bus = HealthSignalBus()
    received: list[HealthSignal] = []
    bus.subscribe(received.append)

    bus.publish(HealthSignal.service_unavailable)
    bus.publish(HealthSignal.service_unavailable)

    assert received == [HealthSignal.service_unavailable, HealthSignal.service_unavailable]


def test_failing_subscriber_does_not_block_others() -> None:
    bus = HealthSignalBus()
    received: list[HealthSignal] = []

    def _broken(_signal: HealthSignal) -> None:
        raise RuntimeError("banner widget gone")

    bus.subscribe(_broken)
    bus.subscribe(received.append)
    bus.publish(HealthSignal.server_error)

    assert received == [HealthSignal.server_error]


def test_unsubscribe_unknown_callback_is_noop() -> None:
    bus = HealthSignalBus()
    bus.unsubscribe(print)


def test_signal_names_match_presentation_events() -> None:
    assert HealthSignal.service_unavailable.value == "service-unavailable"
    assert HealthSignal.server_error.value == "server-error"
