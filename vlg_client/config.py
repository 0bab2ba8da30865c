from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from vlg_client.core.device import EnvironmentProbe, TimeoutPolicy

DEFAULT_BASE_URL = "http://localhost:8080/"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True, slots=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    # "development" | "production"
    env: str = "production"
    log_level: str = "info"
    timeout_policy: TimeoutPolicy = field(default_factory=TimeoutPolicy)
    probe: EnvironmentProbe = field(default_factory=EnvironmentProbe)


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().casefold() in {"1", "true", "yes", "on"}


def _timeout_policy_from_env() -> TimeoutPolicy:
    default = TimeoutPolicy()
    standard_ms = _env_int("VLG_TIMEOUT_STANDARD_MS")
    constrained_ms = _env_int("VLG_TIMEOUT_CONSTRAINED_MS")
    return TimeoutPolicy(
        standard_s=standard_ms / 1000 if standard_ms and standard_ms > 0 else default.standard_s,
        constrained_s=constrained_ms / 1000 if constrained_ms and constrained_ms > 0 else default.constrained_s,
    )


def probe_from_env() -> EnvironmentProbe:
    """Device probe values supplied by the host (headless runners, kiosks, tests)."""

    return EnvironmentProbe(
        user_agent=os.environ.get("VLG_USER_AGENT") or None,
        max_touch_points=_env_int("VLG_MAX_TOUCH_POINTS"),
        coarse_pointer=_env_bool("VLG_POINTER_COARSE"),
        viewport_width=_env_int("VLG_VIEWPORT_WIDTH"),
        viewport_height=_env_int("VLG_VIEWPORT_HEIGHT"),
        screen_width=_env_int("VLG_SCREEN_WIDTH"),
        screen_height=_env_int("VLG_SCREEN_HEIGHT"),
    )


def settings_from_env(*, dotenv_path: Path | None = None) -> Settings:
    """Build settings from the process environment.

    A `.env` file (current directory by default) is loaded first without
    overriding variables that are already set.
    """

    load_dotenv(dotenv_path=dotenv_path, override=False)

    env = os.environ.get("VLG_ENV", "production").strip().casefold() or "production"
    log_level = os.environ.get("VLG_LOG_LEVEL") or ("debug" if env == "development" else "info")

    base_url = os.environ.get("VLG_BASE_URL") or DEFAULT_BASE_URL
    # urljoin drops the last path segment of a base without a trailing slash.
    if not base_url.endswith("/"):
        base_url += "/"

    return Settings(
        base_url=base_url,
        env=env,
        log_level=log_level.strip().casefold(),
        timeout_policy=_timeout_policy_from_env(),
        probe=probe_from_env(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=_LOG_LEVELS.get(settings.log_level, logging.INFO))
