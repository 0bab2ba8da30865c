from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)

SMALL_SCREEN_PX = 820

_MOBILE_UA = re.compile(r"Mobi|Android|iPhone|iPod", re.IGNORECASE)
_TABLET_CLASS_UA = re.compile(r"iPad|Macintosh", re.IGNORECASE)


class DeviceClass(StrEnum):
    standard = "standard"
    constrained = "constrained"


@dataclass(frozen=True, slots=True)
class EnvironmentProbe:
    """Best-effort snapshot of the host environment.

    Every field is optional; a missing probe reads as absent/zero. None of these
    values are trustworthy and they only ever size a timeout.
    """

    user_agent: str | None = None
    max_touch_points: int | None = None
    # Legacy (pre-standard) touch point count, used when max_touch_points is absent.
    ms_max_touch_points: int | None = None
    coarse_pointer: bool | None = None
    viewport_width: int | None = None
    viewport_height: int | None = None
    screen_width: int | None = None
    screen_height: int | None = None


@dataclass(frozen=True, slots=True)
class TimeoutPolicy:
    standard_s: float = 5.0
    constrained_s: float = 10.0

    def duration_for(self, device_class: DeviceClass) -> float:
        if device_class is DeviceClass.constrained:
            return self.constrained_s
        return self.standard_s


def _int_or_zero(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    return 0


def classify_environment(probe: EnvironmentProbe) -> DeviceClass:
    """Label the client as constrained (mobile/touch) or standard.

    Constrained when the user agent looks mobile (including an iPad reporting a
    desktop user agent while exposing several touch points), or when the pointer
    is coarse and the smaller screen side is under 820 px.
    """

    ua = probe.user_agent if isinstance(probe.user_agent, str) else ""
    touch_points = _int_or_zero(probe.max_touch_points) or _int_or_zero(probe.ms_max_touch_points)
    coarse = probe.coarse_pointer is True

    is_apple_tablet = bool(_TABLET_CLASS_UA.search(ua)) and touch_points > 1
    is_mobile_ua = bool(_MOBILE_UA.search(ua)) or is_apple_tablet

    width = _int_or_zero(probe.viewport_width) or _int_or_zero(probe.screen_width)
    height = _int_or_zero(probe.viewport_height) or _int_or_zero(probe.screen_height)
    small_screen = min(width, height) < SMALL_SCREEN_PX

    if is_mobile_ua or (coarse and small_screen):
        return DeviceClass.constrained
    return DeviceClass.standard


class DeviceClassifier:
    """Computes the device class once and keeps it for the classifier's lifetime.

    The probe is read lazily on the first `classify()` call. There is no
    re-evaluation on resize or orientation change.
    """

    def __init__(self, probe_source: Callable[[], EnvironmentProbe]) -> None:
        self._probe_source = probe_source
        self._device_class: DeviceClass | None = None

    def classify(self) -> DeviceClass:
        if self._device_class is None:
            try:
                probe = self._probe_source()
                if not isinstance(probe, EnvironmentProbe):
                    probe = EnvironmentProbe()
                device_class = classify_environment(probe)
            except Exception as e:
                logger.debug("device probe unavailable (%s); using defaults", e)
                device_class = classify_environment(EnvironmentProbe())
            self._device_class = device_class
            logger.info("device class: %s", device_class.value)
        return self._device_class
