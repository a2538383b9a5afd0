"""Conditional fetches of index entries from the default registry."""

from __future__ import annotations

import logging

from rel.core.result import Err, Ok, Result
from rel.policy.model import CertsSource

from .errors import RegistryError
from .http import HttpxTransport, IndexTransport
from .sparse import CRATES_IO_INDEX_URL, IndexKrate, decode_entry, index_path, validate_name

__all__ = ["RemoteIndex"]

logger = logging.getLogger(__name__)

# Statuses the index uses for "no such package"
_ABSENT_STATUSES = frozenset({404, 410, 451})


class RemoteIndex:
    """Fetches index entries, revalidating with the last ETag seen per package.

    A `304 Not Modified` answer reuses the entry decoded earlier in this run
    for the same package; without one it is treated as absent.
    """

    def __init__(self, transport: IndexTransport, index_url: str = CRATES_IO_INDEX_URL) -> None:
        self._transport = transport
        self._index_url = index_url.rstrip("/") + "/"
        self._etags: dict[str, str] = {}
        self._entries: dict[str, IndexKrate | None] = {}

    @classmethod
    def open(cls, certs_source: CertsSource = CertsSource.WEBPKI) -> Result[RemoteIndex, RegistryError]:
        """Create a client for the crates.io sparse index."""
        try:
            transport = HttpxTransport(certs_source=certs_source)
        except (ImportError, OSError) as e:
            return Err(RegistryError("network", f"Cannot create index client: {e}"))
        return Ok(cls(transport))

    def etag(self, name: str) -> str | None:
        """The validator that the next fetch of `name` will send."""
        return self._etags.get(name)

    def url_for(self, name: str) -> str:
        return self._index_url + index_path(name)

    def fetch(self, name: str) -> Result[IndexKrate | None, RegistryError]:
        checked = validate_name(name)
        if isinstance(checked, Err):
            return checked

        url = self.url_for(name)
        headers = {"Accept": "text/plain", "Cargo-Protocol": "version=1"}
        etag = self._etags.get(name, "")
        if etag:
            headers["If-None-Match"] = etag

        result = self._transport.get(url, headers)
        if isinstance(result, Err):
            return result
        response = result.value

        new_etag = response.headers.get("etag")
        if new_etag:
            self._etags[name] = new_etag

        match response.status:
            case 200:
                decoded = decode_entry(response.body, url=url)
                if isinstance(decoded, Err):
                    return decoded
                self._entries[name] = decoded.value
                return decoded
            case 304:
                logger.debug("Index entry for %s not modified", name)
                return Ok(self._entries.get(name))
            case status if status in _ABSENT_STATUSES:
                self._entries[name] = None
                return Ok(None)
            case status:
                return Err(
                    RegistryError("http_status", "unexpected index response", url=url, status=status)
                )

    def close(self) -> None:
        self._transport.close()

