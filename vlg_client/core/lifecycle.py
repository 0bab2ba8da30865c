from __future__ import annotations

from collections.abc import Callable

from statemachine import State, StateMachine


class RequestLifecycle(StateMachine):
    """Per-request lifecycle.

    idle -> in_flight on dispatch; in_flight -> timed_out_pending when the timer
    fires before the transport settles (the transport still gets to react to the
    cancellation); any state -> settled on the first transport result. Entering
    `settled` runs the release hook.
    """

    idle = State("idle", value="idle", initial=True)
    in_flight = State("in_flight", value="in_flight")
    timed_out_pending = State("timed_out_pending", value="timed_out_pending")
    settled = State("settled", value="settled", final=True)

    begin = idle.to(in_flight)
    time_out = in_flight.to(timed_out_pending)
    settle = idle.to(settled) | in_flight.to(settled) | timed_out_pending.to(settled)

    def __init__(self, *, release: Callable[[], None] | None = None):
        self._release = release
        super().__init__()

    def on_enter_settled(self) -> None:
        if self._release is not None:
            self._release()

    def mark_timed_out(self) -> None:
        if self.in_flight.is_active:
            self.time_out()
