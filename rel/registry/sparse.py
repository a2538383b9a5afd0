"""The slice of the sparse index protocol needed to answer membership queries.

An index entry lives at a path derived from the lower-cased package name:

    1 char   -> 1/<name>
    2 chars  -> 2/<name>
    3 chars  -> 3/<first char>/<name>
    4+ chars -> <chars 1-2>/<chars 3-4>/<name>

and holds one JSON object per line, one line per published version.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from rel.core.result import Err, Ok, Result
from rel.core.structured import as_str_dict

from .errors import RegistryError

__all__ = [
    "CRATES_IO_INDEX_URL",
    "MAX_NAME_LENGTH",
    "IndexVersion",
    "IndexKrate",
    "validate_name",
    "index_path",
    "decode_entry",
]

CRATES_IO_INDEX_URL = "https://index.crates.io/"

MAX_NAME_LENGTH = 64

_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


@dataclass(frozen=True, slots=True)
class IndexVersion:
    version: str
    yanked: bool = False
    checksum: str | None = None


@dataclass(frozen=True, slots=True)
class IndexKrate:
    """A package's index entry: its name and every published version, in index order."""

    name: str
    versions: tuple[IndexVersion, ...]

    def has_version(self, version: str) -> bool:
        return any(v.version == version for v in self.versions)


def validate_name(name: str) -> Result[str, RegistryError]:
    if not name:
        return Err(RegistryError("invalid_name", "package name is empty"))
    if len(name) > MAX_NAME_LENGTH:
        return Err(
            RegistryError(
                "invalid_name",
                f"package name `{name}` is longer than {MAX_NAME_LENGTH} characters",
            )
        )
    if not _NAME_RE.fullmatch(name):
        return Err(
            RegistryError(
                "invalid_name",
                f"invalid package name `{name}`: expected ASCII letters, digits, `-` or `_`, "
                "starting with a letter",
            )
        )
    return Ok(name)


def index_path(name: str) -> str:
    lower = name.lower()
    match len(lower):
        case 1:
            return f"1/{lower}"
        case 2:
            return f"2/{lower}"
        case 3:
            return f"3/{lower[0]}/{lower}"
    return f"{lower[0:2]}/{lower[2:4]}/{lower}"


def decode_entry(body: bytes, *, url: str) -> Result[IndexKrate | None, RegistryError]:
    """Decode an index file; an empty body means there is no entry."""
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        return Err(RegistryError("malformed_body", f"index entry is not UTF-8: {e}", url=url))

    name: str | None = None
    versions: list[IndexVersion] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            record = as_str_dict(json.loads(line))
        except json.JSONDecodeError as e:
            return Err(RegistryError("malformed_body", f"line {lineno}: {e}", url=url))
        if record is None:
            return Err(RegistryError("malformed_body", f"line {lineno}: expected an object", url=url))

        record_name = record.get("name")
        vers = record.get("vers")
        if not isinstance(record_name, str) or not isinstance(vers, str):
            return Err(
                RegistryError("malformed_body", f"line {lineno}: missing `name` or `vers`", url=url)
            )
        yanked = record.get("yanked", False)
        checksum = record.get("cksum")
        name = name or record_name
        versions.append(
            IndexVersion(
                version=vers,
                yanked=yanked if isinstance(yanked, bool) else False,
                checksum=checksum if isinstance(checksum, str) else None,
            )
        )

    if name is None:
        return Ok(None)
    return Ok(IndexKrate(name=name, versions=tuple(versions)))
