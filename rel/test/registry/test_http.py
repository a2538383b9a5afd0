"""Tests for rel.registry.http module."""

from __future__ import annotations

import httpx
import pytest

from rel.core.result import Err, Ok
from rel.policy.model import CertsSource
from rel.registry.errors import RegistryError
from rel.registry.http import (
    USER_AGENT,
    HttpxTransport,
    IndexResponse,
    IndexTransport,
    MockIndexTransport,
)

URL = "https://index.crates.io/se/rd/serde"


# =============================================================================
# RegistryError tests
# =============================================================================


class TestRegistryError:
    def test_str_with_status(self) -> None:
        error = RegistryError("http_status", "unexpected index response", url=URL, status=500)
        assert str(error) == f"HTTP 500: unexpected index response ({URL})"

    def test_str_without_status(self) -> None:
        assert str(RegistryError("network", "Request timed out")) == "Request timed out"

    def test_is_frozen(self) -> None:
        error = RegistryError("network", "x")
        with pytest.raises(AttributeError):
            error.status = 1  # type: ignore[misc]


# =============================================================================
# HttpxTransport tests
# =============================================================================


class TestHttpxTransport:
    def test_returns_status_headers_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, headers={"ETag": '"abc"'}, content=b"line\n")

        transport = HttpxTransport(transport=httpx.MockTransport(handler))
        result = transport.get(URL, {"If-None-Match": '"old"'})
        transport.close()

        assert isinstance(result, Ok)
        assert result.value.status == 200
        assert result.value.headers["etag"] == '"abc"'
        assert result.value.body == b"line\n"
        assert seen[0].headers["If-None-Match"] == '"old"'
        assert seen[0].headers["User-Agent"] == USER_AGENT

    def test_error_status_is_ok(self) -> None:
        """Statuses are interpreted by the caller, not the transport."""
        transport = HttpxTransport(transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        result = transport.get(URL, {})
        assert isinstance(result, Ok)
        assert result.value.status == 503

    def test_connection_failure_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpxTransport(transport=httpx.MockTransport(handler))
        result = transport.get(URL, {})
        assert isinstance(result, Err)
        assert result.error.kind == "network"
        assert result.error.url == URL
        assert "connection refused" in result.error.message

    def test_timeout_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        transport = HttpxTransport(transport=httpx.MockTransport(handler))
        result = transport.get(URL, {})
        assert isinstance(result, Err)
        assert result.error.message == "Request timed out"

    def test_native_certs(self) -> None:
        transport = HttpxTransport(
            certs_source=CertsSource.NATIVE,
            transport=httpx.MockTransport(lambda r: httpx.Response(404)),
        )
        result = transport.get(URL, {})
        assert isinstance(result, Ok)
        assert result.value.status == 404

    def test_implements_protocol(self) -> None:
        transport = HttpxTransport(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        assert isinstance(transport, IndexTransport)


# =============================================================================
# MockIndexTransport tests
# =============================================================================


class TestMockIndexTransport:
    def test_unknown_url_is_404(self) -> None:
        result = MockIndexTransport().get(URL, {})
        assert result == Ok(IndexResponse(status=404))

    def test_responses_served_in_order_last_repeats(self) -> None:
        mock = MockIndexTransport()
        mock.add(URL, IndexResponse(200, body=b"a"))
        mock.add(URL, IndexResponse(304))
        statuses = [mock.get(URL, {}).unwrap().status for _ in range(3)]
        assert statuses == [200, 304, 304]

    def test_scripted_error(self) -> None:
        mock = MockIndexTransport()
        mock.add(URL, RegistryError("network", "down", url=URL))
        assert mock.get(URL, {}) == Err(RegistryError("network", "down", url=URL))

    def test_records_calls_and_close(self) -> None:
        mock = MockIndexTransport()
        mock.get(URL, {"Accept": "text/plain"})
        mock.close()
        assert mock.calls == [(URL, {"Accept": "text/plain"})]
        assert mock.closed
        assert isinstance(mock, IndexTransport)
