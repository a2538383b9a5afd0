"""Registry state oracle: cached, conditional queries of the package index."""

from .cache import Connected, IndexCache, Unconnected
from .errors import RegistryError
from .http import HttpxTransport, IndexResponse, IndexTransport, MockIndexTransport
from .remote import RemoteIndex
from .sparse import CRATES_IO_INDEX_URL, IndexKrate, IndexVersion

__all__ = [
    # cache
    "Connected",
    "IndexCache",
    "Unconnected",
    # errors
    "RegistryError",
    # http
    "HttpxTransport",
    "IndexResponse",
    "IndexTransport",
    "MockIndexTransport",
    # remote
    "RemoteIndex",
    # sparse
    "CRATES_IO_INDEX_URL",
    "IndexKrate",
    "IndexVersion",
]
