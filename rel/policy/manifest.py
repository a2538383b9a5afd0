"""Structural view of a `Cargo.toml`.

Only the fields release policy depends on are modelled; everything else in
the manifest is ignored. Two of them accept several untagged shapes and are
disambiguated by trying each shape in order:

- `publish`: boolean, then a list of allowed registry names
- `publish` / `version` in `[package]`: `{ workspace = <bool> }` inheritance
  marker first, then the field's own value
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rel.core.result import Err, Ok, Result
from rel.core.structured import StrDict, as_str_dict, as_str_list, get_path, get_table

from .errors import PolicyError

__all__ = [
    "MANIFEST_NAME",
    "PublishField",
    "InheritFromWorkspace",
    "PackageSection",
    "WorkspaceSection",
    "Manifest",
    "publishable",
    "parse_manifest",
    "load_manifest",
]

MANIFEST_NAME = "Cargo.toml"

# `publish = false` or `publish = ["my-registry"]`
type PublishField = bool | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class InheritFromWorkspace:
    """`field.workspace = true`: the value comes from `[workspace.package]`."""

    workspace: bool


@dataclass(frozen=True, slots=True)
class PackageSection:
    publish: InheritFromWorkspace | PublishField | None = None
    version: InheritFromWorkspace | str | None = None
    release_table: StrDict | None = None


@dataclass(frozen=True, slots=True)
class WorkspaceSection:
    members: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    package_publish: PublishField | None = None
    release_table: StrDict | None = None


@dataclass(frozen=True, slots=True)
class Manifest:
    path: Path
    package: PackageSection | None = None
    workspace: WorkspaceSection | None = None


def publishable(publish: PublishField) -> bool:
    """A registry allow-list permits publishing only when it is non-empty."""
    if isinstance(publish, bool):
        return publish
    return len(publish) > 0


class _ManifestShapeError(ValueError):
    pass


def _publish_field(key: str, value: object) -> PublishField:
    if isinstance(value, bool):
        return value
    registries = as_str_list(value)
    if registries is not None:
        return tuple(registries)
    raise _ManifestShapeError(f"`{key}`: expected a boolean or a list of registry names")


def _version_field(key: str, value: object) -> str:
    if isinstance(value, str):
        return value
    raise _ManifestShapeError(f"`{key}`: expected a version string")


def _maybe_workspace[T](
    key: str,
    value: object,
    parse: Callable[[str, object], T],
) -> InheritFromWorkspace | T:
    table = as_str_dict(value)
    if table is not None:
        flag = table.get("workspace")
        if not isinstance(flag, bool):
            raise _ManifestShapeError(f"`{key}`: expected `{{ workspace = true }}`")
        return InheritFromWorkspace(flag)
    return parse(key, value)


def _release_table(section: StrDict, key: str) -> StrDict | None:
    metadata = get_table(section, "metadata")
    if metadata is None or "release" not in metadata:
        return None
    table = get_table(metadata, "release")
    if table is None:
        raise _ManifestShapeError(f"`{key}.metadata.release`: expected a table")
    return table


def _parse(data: StrDict, path: Path) -> Manifest:
    package: PackageSection | None = None
    raw_package = get_table(data, "package")
    if raw_package is not None:
        publish = raw_package.get("publish")
        version = raw_package.get("version")
        package = PackageSection(
            publish=None
            if publish is None
            else _maybe_workspace("package.publish", publish, _publish_field),
            version=None
            if version is None
            else _maybe_workspace("package.version", version, _version_field),
            release_table=_release_table(raw_package, "package"),
        )

    workspace: WorkspaceSection | None = None
    raw_workspace = get_table(data, "workspace")
    if raw_workspace is not None:
        shared = get_path(raw_workspace, "package") or {}
        publish = shared.get("publish")
        members = as_str_list(raw_workspace.get("members", []))
        if members is None:
            raise _ManifestShapeError("`workspace.members`: expected a list of paths")
        exclude = as_str_list(raw_workspace.get("exclude", []))
        if exclude is None:
            raise _ManifestShapeError("`workspace.exclude`: expected a list of paths")
        workspace = WorkspaceSection(
            members=tuple(members),
            exclude=tuple(exclude),
            package_publish=None
            if publish is None
            else _publish_field("workspace.package.publish", publish),
            release_table=_release_table(raw_workspace, "workspace"),
        )

    return Manifest(path=path, package=package, workspace=workspace)


def parse_manifest(text: str, *, path: Path) -> Result[Manifest, PolicyError]:
    """Parse manifest text; errors name `path`."""
    try:
        data = as_str_dict(tomllib.loads(text))
    except tomllib.TOMLDecodeError as e:
        return Err(PolicyError("manifest_error", f"Failed to parse manifest: {e}", path=path))
    if data is None:
        return Err(PolicyError("manifest_error", "Manifest root must be a TOML table", path=path))
    try:
        return Ok(_parse(data, path))
    except _ManifestShapeError as e:
        return Err(PolicyError("manifest_error", f"Failed to parse manifest: {e}", path=path))


def load_manifest(path: Path) -> Result[Manifest | None, PolicyError]:
    """Read a manifest; a missing file is `Ok(None)`."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except (OSError, UnicodeDecodeError) as e:
        return Err(PolicyError("io_error", f"Cannot read manifest: {e}", path=path))
    return parse_manifest(text, path=path)
