"""Tests for rel.registry.remote module."""

from __future__ import annotations

import pytest

from rel.core.result import Err, Ok
from rel.registry.errors import RegistryError
from rel.registry.http import IndexResponse, MockIndexTransport
from rel.registry.remote import RemoteIndex
from rel.registry.sparse import IndexKrate, IndexVersion

URL = "https://index.crates.io/se/rd/serde"
BODY = b'{"name": "serde", "vers": "1.0.0"}\n{"name": "serde", "vers": "1.0.1"}\n'
SERDE = IndexKrate("serde", (IndexVersion("1.0.0"), IndexVersion("1.0.1")))


def _index(*responses: IndexResponse | RegistryError) -> tuple[RemoteIndex, MockIndexTransport]:
    transport = MockIndexTransport()
    for response in responses:
        transport.add(URL, response)
    return RemoteIndex(transport), transport


class TestUrls:
    def test_default_index(self) -> None:
        index, _ = _index()
        assert index.url_for("serde") == URL

    def test_custom_index_url_gets_slash(self) -> None:
        index = RemoteIndex(MockIndexTransport(), index_url="http://localhost:8080/index")
        assert index.url_for("ab") == "http://localhost:8080/index/2/ab"


class TestFetch:
    def test_found(self) -> None:
        index, _ = _index(IndexResponse(200, body=BODY))
        assert index.fetch("serde") == Ok(SERDE)

    @pytest.mark.parametrize("status", [404, 410, 451])
    def test_absent_statuses(self, status: int) -> None:
        index, _ = _index(IndexResponse(status))
        assert index.fetch("serde") == Ok(None)

    def test_sends_protocol_headers(self) -> None:
        index, transport = _index(IndexResponse(200, body=BODY))
        index.fetch("serde")
        _, headers = transport.calls[0]
        assert headers["Accept"] == "text/plain"
        assert headers["Cargo-Protocol"] == "version=1"
        assert "If-None-Match" not in headers

    def test_unexpected_status_is_error(self) -> None:
        index, _ = _index(IndexResponse(500))
        result = index.fetch("serde")
        assert isinstance(result, Err)
        assert result.error.kind == "http_status"
        assert result.error.status == 500
        assert result.error.url == URL

    def test_transport_error_propagates(self) -> None:
        index, _ = _index(RegistryError("network", "down", url=URL))
        assert index.fetch("serde") == Err(RegistryError("network", "down", url=URL))

    def test_malformed_body_is_error(self) -> None:
        index, _ = _index(IndexResponse(200, body=b"garbage"))
        result = index.fetch("serde")
        assert isinstance(result, Err)
        assert result.error.kind == "malformed_body"

    def test_invalid_name_makes_no_request(self) -> None:
        index, transport = _index()
        result = index.fetch("not a name")
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_name"
        assert transport.calls == []


class TestRevalidation:
    def test_etag_is_remembered_and_sent(self) -> None:
        index, transport = _index(
            IndexResponse(200, headers={"etag": '"v1"'}, body=BODY),
            IndexResponse(304),
        )
        index.fetch("serde")
        assert index.etag("serde") == '"v1"'

        index.fetch("serde")
        _, headers = transport.calls[1]
        assert headers["If-None-Match"] == '"v1"'

    def test_not_modified_reuses_earlier_entry(self) -> None:
        index, _ = _index(
            IndexResponse(200, headers={"etag": '"v1"'}, body=BODY),
            IndexResponse(304, headers={"etag": '"v1"'}),
        )
        assert index.fetch("serde") == Ok(SERDE)
        assert index.fetch("serde") == Ok(SERDE)

    def test_not_modified_without_earlier_entry_is_absent(self) -> None:
        index, _ = _index(IndexResponse(304))
        assert index.fetch("serde") == Ok(None)

    def test_newer_etag_replaces_older(self) -> None:
        index, _ = _index(
            IndexResponse(200, headers={"etag": '"v1"'}, body=BODY),
            IndexResponse(200, headers={"etag": '"v2"'}, body=BODY),
        )
        index.fetch("serde")
        index.fetch("serde")
        assert index.etag("serde") == '"v2"'

    def test_response_without_etag_keeps_old_one(self) -> None:
        index, _ = _index(
            IndexResponse(200, headers={"etag": '"v1"'}, body=BODY),
            IndexResponse(200, body=BODY),
        )
        index.fetch("serde")
        index.fetch("serde")
        assert index.etag("serde") == '"v1"'

    def test_etags_are_per_package(self) -> None:
        index, _ = _index(IndexResponse(200, headers={"etag": '"v1"'}, body=BODY))
        index.fetch("serde")
        assert index.etag("tokio") is None


class TestClose:
    def test_close_closes_transport(self) -> None:
        index, transport = _index()
        index.close()
        assert transport.closed
