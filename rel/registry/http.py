"""HTTP transport for index requests.

This module provides:
- IndexTransport: Protocol for conditional GETs (injectable for tests)
- HttpxTransport: Real implementation on one persistent httpx client
- MockIndexTransport: Scripted implementation for testing
"""

from __future__ import annotations

import ssl
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import httpx

from rel import __version__
from rel.core.result import Err, Ok, Result
from rel.policy.model import CertsSource

from .errors import RegistryError

__all__ = [
    "IndexResponse",
    "IndexTransport",
    "HttpxTransport",
    "MockIndexTransport",
]

USER_AGENT = f"rel/{__version__}"


@dataclass(frozen=True, slots=True)
class IndexResponse:
    """A received response. Header names are lower-cased."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


@runtime_checkable
class IndexTransport(Protocol):
    """Protocol for the requests the remote index makes."""

    def get(self, url: str, headers: Mapping[str, str]) -> Result[IndexResponse, RegistryError]:
        """Send a GET; any received status is Ok, only transport failures are Err."""
        ...

    def close(self) -> None: ...


def _verify(certs_source: CertsSource) -> ssl.SSLContext | bool:
    match certs_source:
        case CertsSource.WEBPKI:
            # httpx default: the certifi bundle
            return True
        case CertsSource.NATIVE:
            return ssl.create_default_context()


class HttpxTransport:
    """Real transport on a single `httpx.Client`.

    The client keeps its connections alive across requests and speaks
    HTTP/2 when the server offers it during the TLS handshake, so repeated
    index lookups share one multiplexed connection.
    """

    def __init__(
        self,
        certs_source: CertsSource = CertsSource.WEBPKI,
        user_agent: str = USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            certs_source: Trust store for TLS verification
            user_agent: User-Agent header value
            transport: Replacement transport (tests use `httpx.MockTransport`)
        """
        self._client = httpx.Client(
            http2=True,
            verify=_verify(certs_source),
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    def get(self, url: str, headers: Mapping[str, str]) -> Result[IndexResponse, RegistryError]:
        try:
            response = self._client.get(url, headers=dict(headers))
        except httpx.TimeoutException:
            return Err(RegistryError("network", "Request timed out", url=url))
        except httpx.HTTPError as e:
            return Err(RegistryError("network", str(e) or type(e).__name__, url=url))

        return Ok(
            IndexResponse(
                status=response.status_code,
                headers={k.lower(): v for k, v in response.headers.items()},
                body=response.content,
            )
        )

    def close(self) -> None:
        self._client.close()


class MockIndexTransport:
    """Transport that replays scripted responses.

    Responses queued for a URL are served in order; the last one repeats.
    Unknown URLs answer 404.

    Usage:
        transport = MockIndexTransport()
        transport.add("https://index.crates.io/se/rd/serde", IndexResponse(200, body=b"..."))
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[IndexResponse | RegistryError]] = {}
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.closed = False

    def add(self, url: str, response: IndexResponse | RegistryError) -> None:
        self._responses.setdefault(url, []).append(response)

    def get(self, url: str, headers: Mapping[str, str]) -> Result[IndexResponse, RegistryError]:
        self.calls.append((url, dict(headers)))
        queue = self._responses.get(url)
        if not queue:
            return Ok(IndexResponse(status=404))
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, RegistryError):
            return Err(response)
        return Ok(response)

    def close(self) -> None:
        self.closed = True
