from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union
from urllib.parse import urljoin, urlsplit

from vlg_client.core.errors import CrossOriginError, ErrorKind

if TYPE_CHECKING:
    from vlg_client.core.cancellation import CancelToken


def _origin(url: str) -> tuple[str, str]:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """One request to the application's own server.

    `path` is a path + query relative to the configured base URL, e.g.
    `api.php?action=listRooms`. Absolute and scheme-relative URLs are rejected.
    `body` is already encoded; the core never inspects it.
    """

    path: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None
    cancel: CancelToken | None = None

    def __post_init__(self) -> None:
        parts = urlsplit(self.path)
        if parts.scheme or parts.netloc or self.path.startswith(("//", "\\\\", "/\\")):
            raise CrossOriginError(f"Request path must be relative to the app origin: {self.path!r}")


def resolve_url(base_url: str, path: str) -> str:
    """Resolve `path` against `base_url`, refusing any change of origin."""

    url = urljoin(base_url, path)
    if _origin(url) != _origin(base_url):
        raise CrossOriginError(f"Resolved URL {url!r} leaves origin of {base_url!r}")
    return url


@dataclass(frozen=True, slots=True)
class Success:
    value: Any


@dataclass(frozen=True, slots=True)
class Failure:
    kind: ErrorKind
    message: str
    status: int | None = None


Outcome = Union[Success, Failure]
