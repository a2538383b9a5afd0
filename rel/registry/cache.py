"""Per-run cache in front of the remote index.

Answers "is package P (at version V) in the registry" for the release
steps. Only the default registry (`registry=None`) can be queried; for any
other registry the answer is unknown, which is reported as `None` and never
as "absent".

Cached entries live for one run. A cached `None` is a confirmed absence;
a missing key means the package was never looked up. `invalidate` drops an
entry so the next lookup goes back to the index, e.g. when waiting for a
freshly published version to appear.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from rel.core.result import Err, Ok, Result
from rel.policy.model import CertsSource

from .errors import RegistryError
from .remote import RemoteIndex
from .sparse import IndexKrate

__all__ = [
    "Unconnected",
    "Connected",
    "ConnectionState",
    "IndexOpener",
    "IndexCache",
]

logger = logging.getLogger(__name__)

type IndexOpener = Callable[[], Result[RemoteIndex, RegistryError]]


@dataclass(frozen=True, slots=True)
class Unconnected:
    """No connection yet; nothing has needed the network."""


@dataclass(frozen=True, slots=True)
class Connected:
    index: RemoteIndex


type ConnectionState = Unconnected | Connected


class IndexCache:
    """Memoizing front end for `RemoteIndex`.

    The connection is opened on the first lookup that misses the cache for
    the default registry, and never otherwise.

    Not safe for concurrent use: callers that parallelize release steps
    must serialize access to one instance.
    """

    def __init__(
        self,
        opener: IndexOpener | None = None,
        *,
        certs_source: CertsSource = CertsSource.WEBPKI,
    ) -> None:
        self._opener: IndexOpener = opener or (lambda: RemoteIndex.open(certs_source))
        self._state: ConnectionState = Unconnected()
        self._cache: dict[str, IndexKrate | None] = {}

    @property
    def state(self) -> ConnectionState:
        return self._state

    def has_package(self, registry: str | None, name: str) -> Result[bool, RegistryError]:
        """True iff the lookup finds an entry (unknown registries count as not found)."""
        return self.lookup(registry, name).map(lambda entry: entry is not None)

    def has_package_version(
        self,
        registry: str | None,
        name: str,
        version: str,
    ) -> Result[bool | None, RegistryError]:
        """Whether `version` of `name` is published; `None` if it cannot be known."""
        if registry is not None:
            return Ok(None)
        return self.lookup(registry, name).map(
            lambda entry: entry is not None and entry.has_version(version)
        )

    def invalidate(self, registry: str | None, name: str) -> None:
        if registry is not None:
            return
        self._cache.pop(name, None)

    def lookup(self, registry: str | None, name: str) -> Result[IndexKrate | None, RegistryError]:
        if registry is not None:
            logger.debug("Cannot connect to registry `%s`", registry)
            return Ok(None)

        if name in self._cache:
            logger.debug("Reusing index for %s", name)
            return Ok(self._cache[name])

        connected = self._connect()
        if isinstance(connected, Err):
            return connected

        logger.debug("Downloading index for %s", name)
        result = connected.value.fetch(name)
        if isinstance(result, Ok):
            self._cache[name] = result.value
        return result

    def _connect(self) -> Result[RemoteIndex, RegistryError]:
        match self._state:
            case Connected(index=index):
                return Ok(index)
            case Unconnected():
                logger.debug("Connecting to index")
                opened = self._opener()
                if isinstance(opened, Ok):
                    self._state = Connected(opened.value)
                return opened

    def close(self) -> None:
        """Release the connection; a later lookup reconnects."""
        match self._state:
            case Connected(index=index):
                index.close()
                self._state = Unconnected()
            case Unconnected():
                pass
