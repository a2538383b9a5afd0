"""Layering of policy sources into one policy per workspace or package.

Sources are merged lowest priority first; each later source overrides the
fields it sets:

1. `<home>/.release.toml`
2. `<config dir>/cargo-release/release.toml`
3. `<workspace>/release.toml`
4. `<workspace>/Cargo.toml` `[workspace.metadata.release]`
5. `<package>/release.toml`                                  (package only)
6. `<package>/Cargo.toml` `[package.metadata.release]`       (package only)
7. the `--config PATH` file
8. command-line flags
9. restrictions derived from the package manifest

Steps 1-6 are skipped with `--isolated`. Reads happen one after another in
this order; later reads intentionally override earlier ones.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from rel.core.result import Err, Ok, Result
from rel.platform import paths as platform_paths

from .args import PolicyArgs
from .errors import PolicyError
from .manifest import MANIFEST_NAME, load_manifest
from .model import Policy
from .overrides import ManifestOverrides
from .sources import (
    POLICY_FILE_NAME,
    read_package_manifest_policy,
    read_policy_file,
    read_workspace_manifest_policy,
)

__all__ = [
    "HOME_POLICY_FILE_NAME",
    "PathProvider",
    "SystemPaths",
    "FixedPaths",
    "WorkspaceLayout",
    "resolve_workspace_config",
    "resolve_config",
    "resolve_custom_config",
    "load_workspace_policy",
    "load_package_policy",
]

logger = logging.getLogger(__name__)

HOME_POLICY_FILE_NAME = ".release.toml"


class PathProvider(Protocol):
    """Where the user-global policy files live."""

    def home_dir(self) -> Path | None: ...

    def config_dir(self) -> Path | None: ...


class SystemPaths:
    """User directories of the running process."""

    def home_dir(self) -> Path | None:
        return platform_paths.home()

    def config_dir(self) -> Path | None:
        return platform_paths.user_config_dir()


@dataclass(frozen=True, slots=True)
class FixedPaths:
    """Deterministic user directories; `None` disables that source."""

    home: Path | None = None
    config: Path | None = None

    def home_dir(self) -> Path | None:
        return self.home

    def config_dir(self) -> Path | None:
        return self.config


@dataclass(frozen=True, slots=True)
class WorkspaceLayout:
    """The workspace root and the manifests of its member packages."""

    root: Path
    members: tuple[Path, ...]

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME

    @property
    def is_workspace(self) -> bool:
        return len(self.members) > 1

    @classmethod
    def discover(cls, root: Path) -> Result[WorkspaceLayout, PolicyError]:
        """Expand `workspace.members` globs; a plain package is its only member."""
        manifest_path = root / MANIFEST_NAME
        loaded = load_manifest(manifest_path)
        if isinstance(loaded, Err):
            return loaded
        if loaded.value is None:
            return Err(PolicyError("manifest_error", "Manifest not found", path=manifest_path))

        members: list[Path] = []
        if loaded.value.package is not None:
            members.append(manifest_path)

        workspace = loaded.value.workspace
        if workspace is not None:
            expanded = _expand_members(root, workspace.members, workspace.exclude, manifest_path)
            if isinstance(expanded, Err):
                return expanded
            for candidate in expanded.value:
                if candidate not in members:
                    members.append(candidate)
        return Ok(cls(root=root, members=tuple(members)))


_GLOB_CHARS = frozenset("*?[")


def _member_dirs(root: Path, pattern: str) -> list[Path]:
    if not _GLOB_CHARS.intersection(pattern):
        # `.`, `../shared` and plain paths name one directory
        return [Path(os.path.normpath(root / pattern))]
    return sorted(root.glob(pattern))


def _is_excluded(directory: Path, root: Path, exclude: Iterable[str]) -> bool:
    for entry in exclude:
        excluded = Path(os.path.normpath(root / entry))
        if directory == excluded or excluded in directory.parents:
            return True
    return False


def _expand_members(
    root: Path,
    patterns: Iterable[str],
    exclude: Iterable[str],
    manifest_path: Path,
) -> Result[list[Path], PolicyError]:
    """Member manifests in pattern order; `exclude` entries are path prefixes."""
    found: list[Path] = []
    for pattern in patterns:
        if Path(pattern).is_absolute():
            return Err(
                PolicyError(
                    "manifest_error",
                    f"`workspace.members`: `{pattern}` must be relative to the workspace root",
                    path=manifest_path,
                )
            )
        try:
            directories = _member_dirs(root, pattern)
        except (ValueError, NotImplementedError) as e:
            return Err(
                PolicyError(
                    "manifest_error",
                    f"`workspace.members`: invalid pattern `{pattern}`: {e}",
                    path=manifest_path,
                )
            )
        for directory in directories:
            candidate = directory / MANIFEST_NAME
            if _is_excluded(directory, root, exclude) or not candidate.is_file():
                continue
            if candidate not in found:
                found.append(candidate)
    return Ok(found)


def _merge_source(
    config: Policy,
    result: Result[Policy | None, PolicyError],
    label: str,
) -> Result[Policy, PolicyError]:
    if isinstance(result, Err):
        return result
    if result.value is None:
        return Ok(config)
    logger.debug("Merging policy from %s", label)
    return Ok(config.merge(result.value))


def resolve_workspace_config(
    workspace_root: Path,
    paths: PathProvider | None = None,
) -> Result[Policy, PolicyError]:
    """Merge the user-global and workspace-level sources (steps 1-4)."""
    paths = paths or SystemPaths()
    files: list[Path] = []
    home = paths.home_dir()
    if home is not None:
        files.append(home / HOME_POLICY_FILE_NAME)
    config_dir = paths.config_dir()
    if config_dir is not None:
        files.append(config_dir / platform_paths.APP_NAME / POLICY_FILE_NAME)
    files.append(workspace_root / POLICY_FILE_NAME)

    config = Policy()
    for path in files:
        merged = _merge_source(config, read_policy_file(path), str(path))
        if isinstance(merged, Err):
            return merged
        config = merged.value

    manifest_path = workspace_root / MANIFEST_NAME
    return _merge_source(
        config,
        read_workspace_manifest_policy(manifest_path),
        f"{manifest_path} [workspace.metadata.release]",
    )


def resolve_config(
    workspace_root: Path,
    manifest_path: Path,
    paths: PathProvider | None = None,
) -> Result[Policy, PolicyError]:
    """Merge the workspace-level sources and then the package's own (steps 1-6).

    The package's `[package.metadata.release]` lets the root package of a
    workspace be configured separately from the workspace itself.
    """
    result = resolve_workspace_config(workspace_root, paths)
    if isinstance(result, Err):
        return result
    config = result.value

    package_file = manifest_path.parent / POLICY_FILE_NAME
    merged = _merge_source(config, read_policy_file(package_file), str(package_file))
    if isinstance(merged, Err):
        return merged

    return _merge_source(
        merged.value,
        read_package_manifest_policy(manifest_path),
        f"{manifest_path} [package.metadata.release]",
    )


def resolve_custom_config(path: Path) -> Result[Policy, PolicyError]:
    """Read the `--config` file; a missing file contributes nothing."""
    result = read_policy_file(path)
    if isinstance(result, Err):
        return result
    return Ok(result.value or Policy())


def _apply_explicit(
    config: Policy,
    args: PolicyArgs,
) -> Result[Policy, PolicyError]:
    if args.custom_config is not None:
        custom = resolve_custom_config(args.custom_config)
        if isinstance(custom, Err):
            return custom
        logger.debug("Merging policy from %s", args.custom_config)
        config = config.merge(custom.value)
    return Ok(config.merge(args.to_policy()))


def load_workspace_policy(
    args: PolicyArgs,
    layout: WorkspaceLayout,
    paths: PathProvider | None = None,
) -> Result[Policy, PolicyError]:
    """Resolve the policy that applies to the workspace as a whole.

    Outside a multi-package workspace the single package's sources (and its
    manifest restrictions) stand in for the workspace's, so single-package
    projects need no workspace-specific configuration.
    """
    config = Policy(is_workspace=layout.is_workspace)
    single_package = None if layout.is_workspace or not layout.members else layout.members[0]

    if not args.isolated:
        if single_package is None:
            resolved = resolve_workspace_config(layout.root, paths)
        else:
            resolved = resolve_config(layout.root, single_package, paths)
        if isinstance(resolved, Err):
            return resolved
        config = config.merge(resolved.value)

    explicit = _apply_explicit(config, args)
    if isinstance(explicit, Err) or single_package is None:
        return explicit

    overrides = ManifestOverrides(layout.root).derive(single_package)
    if isinstance(overrides, Err):
        return overrides
    return Ok(explicit.value.merge(overrides.value))


def load_package_policy(
    args: PolicyArgs,
    layout: WorkspaceLayout,
    manifest_path: Path,
    paths: PathProvider | None = None,
    overrides: ManifestOverrides | None = None,
) -> Result[Policy, PolicyError]:
    """Resolve the policy for one package.

    Pass the same `overrides` for every package of a run so the workspace
    manifest is read only once.
    """
    config = Policy(is_workspace=layout.is_workspace)

    if not args.isolated:
        resolved = resolve_config(layout.root, manifest_path, paths)
        if isinstance(resolved, Err):
            return resolved
        config = config.merge(resolved.value)

    explicit = _apply_explicit(config, args)
    if isinstance(explicit, Err):
        return explicit

    # Manifest facts win over everything, command-line flags included
    overrides = overrides or ManifestOverrides(layout.root)
    derived = overrides.derive(manifest_path)
    if isinstance(derived, Err):
        return derived
    return Ok(explicit.value.merge(derived.value))
