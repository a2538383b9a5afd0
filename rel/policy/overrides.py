"""Policy restrictions derived from a package's manifest structure.

What the manifest says about a package outranks every policy source,
command-line flags included:

- a package that cannot be published is never published;
- a package without a `version` has nothing to bump and is never released;
- a package whose version is inherited from the workspace shares that
  version with its siblings, so its commits cannot be isolated.

The derived fragment only ever sets fields to these restrictive values.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rel.core.result import Err, Ok, Result

from .errors import PolicyError
from .manifest import MANIFEST_NAME, InheritFromWorkspace, Manifest, load_manifest, publishable
from .model import WORKSPACE_SHARED_VERSION, Policy, SharedVersionName

__all__ = ["ManifestOverrides", "resolve_overrides"]

logger = logging.getLogger(__name__)


class ManifestOverrides:
    """Derives override fragments for the packages of one workspace.

    The workspace manifest is read lazily, the first time a package inherits
    a field from it, and then reused for every later package.
    """

    def __init__(self, workspace_root: Path) -> None:
        self._workspace_root = workspace_root
        self._workspace: Manifest | None = None

    @property
    def workspace_manifest_path(self) -> Path:
        return self._workspace_root / MANIFEST_NAME

    def _load_workspace(self) -> Result[Manifest, PolicyError]:
        if self._workspace is not None:
            return Ok(self._workspace)

        path = self.workspace_manifest_path
        logger.debug("Reading workspace manifest %s", path)
        result = load_manifest(path)
        if isinstance(result, Err):
            return result
        if result.value is None:
            return Err(
                PolicyError(
                    "manifest_error",
                    "Workspace manifest not found, needed to resolve inherited fields",
                    path=path,
                )
            )
        self._workspace = result.value
        return Ok(self._workspace)

    def _inherited_publishable(self) -> Result[bool, PolicyError]:
        result = self._load_workspace()
        if isinstance(result, Err):
            return result
        workspace = result.value.workspace
        if workspace is None or workspace.package_publish is None:
            return Ok(True)
        return Ok(publishable(workspace.package_publish))

    def derive(self, manifest_path: Path) -> Result[Policy, PolicyError]:
        """Compute the override fragment for the package at `manifest_path`."""
        result = load_manifest(manifest_path)
        if isinstance(result, Err):
            return result
        manifest = result.value
        if manifest is None:
            return Err(PolicyError("manifest_error", "Package manifest not found", path=manifest_path))

        package = manifest.package
        if package is None:
            return Ok(Policy())

        match package.publish:
            case None:
                can_publish = True
            case InheritFromWorkspace(workspace=True):
                inherited = self._inherited_publishable()
                if isinstance(inherited, Err):
                    return inherited
                can_publish = inherited.value
            case InheritFromWorkspace(workspace=False):
                can_publish = True
            case bool() | tuple() as field:
                can_publish = publishable(field)

        overrides: dict[str, object] = {}
        if not can_publish:
            overrides["publish"] = False
        if package.version is None:
            overrides["release"] = False
        if package.version == InheritFromWorkspace(True):
            overrides["shared_version"] = SharedVersionName(WORKSPACE_SHARED_VERSION)
            overrides["consolidate_commits"] = True

        if overrides:
            logger.debug("Manifest %s forces %s", manifest_path, sorted(overrides))
        return Ok(Policy(**overrides))  # type: ignore[arg-type]


def resolve_overrides(workspace_root: Path, manifest_path: Path) -> Result[Policy, PolicyError]:
    """One-shot form of `ManifestOverrides(workspace_root).derive(manifest_path)`."""
    return ManifestOverrides(workspace_root).derive(manifest_path)
