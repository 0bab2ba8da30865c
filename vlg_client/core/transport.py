from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from vlg_client.core.cancellation import CancelToken


@dataclass(frozen=True, slots=True)
class TransportRequest:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status_code: int
    reason_phrase: str
    # Full body, always read, also for non-success statuses.
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """Delivers one request under a cancel token.

    Implementations raise `TransportCancelled` once the token fires and
    `TransportFailure` when no response could be obtained.
    """

    async def send(self, request: TransportRequest, *, cancel: CancelToken) -> TransportResponse:  # pragma: no cover
        ...
