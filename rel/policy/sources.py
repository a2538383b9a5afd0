"""Readers for the individual policy sources.

Each reader returns `Ok(None)` when its source does not exist, so the
pipeline can treat "absent" and "empty" alike. A source that exists but
does not parse is always an error naming the file.
"""

from __future__ import annotations

from pathlib import Path

from rel.core.result import Err, Ok, Result
from rel.core.structured import StrDict

from .errors import PolicyError
from .manifest import Manifest, load_manifest
from .model import Policy
from .schema import loads_policy, policy_from_dict

__all__ = [
    "POLICY_FILE_NAME",
    "read_policy_file",
    "read_workspace_manifest_policy",
    "read_package_manifest_policy",
]

POLICY_FILE_NAME = "release.toml"


def read_policy_file(path: Path) -> Result[Policy | None, PolicyError]:
    """Read a standalone `release.toml`."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except IsADirectoryError:
        return Err(PolicyError("io_error", "Expected a file, found a directory", path=path))
    except PermissionError:
        return Err(PolicyError("io_error", "Permission denied reading policy", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(PolicyError("io_error", f"Error reading policy: {e}", path=path))
    return loads_policy(text, source=path)


def _embedded(manifest: Manifest | None, table: StrDict | None) -> Result[Policy | None, PolicyError]:
    if manifest is None or table is None:
        return Ok(None)
    return policy_from_dict(table, source=manifest.path)


def read_workspace_manifest_policy(manifest_path: Path) -> Result[Policy | None, PolicyError]:
    """Read `[workspace.metadata.release]` from a manifest."""
    result = load_manifest(manifest_path)
    if isinstance(result, Err):
        return result
    manifest = result.value
    table = manifest.workspace.release_table if manifest and manifest.workspace else None
    return _embedded(manifest, table)


def read_package_manifest_policy(manifest_path: Path) -> Result[Policy | None, PolicyError]:
    """Read `[package.metadata.release]` from a manifest."""
    result = load_manifest(manifest_path)
    if isinstance(result, Err):
        return result
    manifest = result.value
    table = manifest.package.release_table if manifest and manifest.package else None
    return _embedded(manifest, table)
