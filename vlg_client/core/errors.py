from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Union

from vlg_client.core.health import HealthSignal


class ErrorKind(StrEnum):
    cancelled = "cancelled"
    service_unavailable = "service_unavailable"
    server_error = "server_error"
    http_error = "http_error"
    network_error = "network_error"
    decode_error = "decode_error"


class VlgClientError(Exception):
    """Base class for errors raised by this package."""


class CrossOriginError(VlgClientError, ValueError):
    """A request target would leave the application's own origin."""


class TransportError(VlgClientError):
    """Raised by transports; never escapes the executor."""


class TransportCancelled(TransportError):
    """The effective cancel token fired before the transport settled."""


class TransportFailure(TransportError):
    """The transport failed before any response arrived (DNS, connect, reset...)."""


# ---- raw failures observed by the executor ----


@dataclass(frozen=True, slots=True)
class CancelledFailure:
    timed_out: bool


@dataclass(frozen=True, slots=True)
class ConnectionFailure:
    message: str


@dataclass(frozen=True, slots=True)
class StatusFailure:
    status: int
    reason: str
    body: str


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    body: str


RawFailure = Union[CancelledFailure, ConnectionFailure, StatusFailure, DecodeFailure]

TIMEOUT_STATUS = 503


def classify_failure(raw: RawFailure) -> ErrorKind:
    """Map a raw failure onto the closed `ErrorKind` taxonomy.

    Pure: no I/O and no bus notification.
    """

    if isinstance(raw, CancelledFailure):
        return ErrorKind.service_unavailable if raw.timed_out else ErrorKind.cancelled
    if isinstance(raw, ConnectionFailure):
        return ErrorKind.network_error
    if isinstance(raw, StatusFailure):
        if raw.status == 503:
            return ErrorKind.service_unavailable
        if raw.status >= 500:
            return ErrorKind.server_error
        return ErrorKind.http_error
    if isinstance(raw, DecodeFailure):
        return ErrorKind.decode_error
    raise TypeError(f"Unknown raw failure: {raw!r}")


def describe_failure(raw: RawFailure) -> str:
    """Human-readable message carried on the `Failure`."""

    if isinstance(raw, CancelledFailure):
        if raw.timed_out:
            return "HTTP 503 Service Unavailable - Request timed out"
        return "Request cancelled"
    if isinstance(raw, ConnectionFailure):
        return f"network error: {raw.message}"
    if isinstance(raw, StatusFailure):
        return f"HTTP {raw.status} {raw.reason} - {raw.body}"
    if isinstance(raw, DecodeFailure):
        return "Invalid JSON response"
    raise TypeError(f"Unknown raw failure: {raw!r}")


def failure_status(raw: RawFailure) -> int | None:
    """HTTP status reported on the `Failure`, or None when no response was seen."""

    if isinstance(raw, StatusFailure):
        return raw.status
    if isinstance(raw, CancelledFailure) and raw.timed_out:
        # A timeout is reported as a synthetic 503.
        return TIMEOUT_STATUS
    return None


def health_signal_for(kind: ErrorKind) -> HealthSignal | None:
    """Health signal to publish for `kind`, if any."""

    if kind is ErrorKind.service_unavailable:
        return HealthSignal.service_unavailable
    if kind is ErrorKind.server_error:
        return HealthSignal.server_error
    # Connectivity failures are per-request, not a service signal.
    return None
