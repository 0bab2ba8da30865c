from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from vlg_client.core.lifecycle import RequestLifecycle


def test_normal_request_path_releases_on_settle() -> None:
    released: list[str] = []
    sm = RequestLifecycle(release=lambda: released.append("x"))

    assert sm.idle.is_active
    sm.begin()
    assert sm.in_flight.is_active
    assert released == []

    sm.settle()
    assert sm.settled.is_active
    assert released == ["x"]


def test_timeout_waits_for_transport_before_settling() -> None:
    released: list[str] = []
    sm = RequestLifecycle(release=lambda: released.append("x"))

    sm.begin()
    sm.mark_timed_out()
    assert sm.timed_out_pending.is_active
    assert released == []

    sm.settle()
    assert released == ["x"]


def test_precancelled_request_settles_from_idle() -> None:
    sm = RequestLifecycle()
    sm.settle()
    assert sm.settled.is_active


def test_mark_timed_out_is_ignored_outside_flight() -> None:
    sm = RequestLifecycle()
    sm.mark_timed_out()
    assert sm.idle.is_active


def test_settled_is_terminal() -> None:
    sm = RequestLifecycle()
    sm.begin()
    sm.settle()
    with pytest.raises(TransitionNotAllowed):
        sm.begin()
