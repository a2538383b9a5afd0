"""Tests for rel.policy.overrides module."""

from __future__ import annotations

from pathlib import Path

import pytest

from rel.core.result import Err, Ok
from rel.policy import manifest as manifest_module
from rel.policy.model import Policy, SharedVersionName
from rel.policy.overrides import ManifestOverrides, resolve_overrides


def _package(root: Path, name: str, body: str) -> Path:
    path = root / name / "Cargo.toml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f'[package]\nname = "{name}"\n{body}', encoding="utf-8")
    return path


def _workspace(root: Path, extra: str = "") -> None:
    (root / "Cargo.toml").write_text(
        f'[workspace]\nmembers = ["*"]\n{extra}', encoding="utf-8"
    )


class TestDerive:
    def test_releasable_package_has_no_overrides(self, tmp_path: Path) -> None:
        path = _package(tmp_path, "a", 'version = "1.0.0"')
        assert resolve_overrides(tmp_path, path) == Ok(Policy())

    def test_publish_false(self, tmp_path: Path) -> None:
        path = _package(tmp_path, "a", 'version = "1.0.0"\npublish = false')
        assert resolve_overrides(tmp_path, path) == Ok(Policy(publish=False))

    def test_empty_registry_list(self, tmp_path: Path) -> None:
        path = _package(tmp_path, "a", 'version = "1.0.0"\npublish = []')
        assert resolve_overrides(tmp_path, path) == Ok(Policy(publish=False))

    def test_registry_list_allows_publish(self, tmp_path: Path) -> None:
        path = _package(tmp_path, "a", 'version = "1.0.0"\npublish = ["internal"]')
        assert resolve_overrides(tmp_path, path) == Ok(Policy())

    def test_no_version_disables_release(self, tmp_path: Path) -> None:
        path = _package(tmp_path, "a", "")
        assert resolve_overrides(tmp_path, path) == Ok(Policy(release=False))

    def test_inherited_version_shares_and_consolidates(self, tmp_path: Path) -> None:
        _workspace(tmp_path, '\n[workspace.package]\nversion = "1.0.0"')
        path = _package(tmp_path, "a", "version.workspace = true")
        assert resolve_overrides(tmp_path, path) == Ok(
            Policy(shared_version=SharedVersionName("workspace"), consolidate_commits=True)
        )

    def test_inherited_publish_false(self, tmp_path: Path) -> None:
        _workspace(tmp_path, "\n[workspace.package]\npublish = false")
        path = _package(tmp_path, "a", 'version = "1.0.0"\npublish.workspace = true')
        assert resolve_overrides(tmp_path, path) == Ok(Policy(publish=False))

    def test_inherited_publish_unset_in_workspace(self, tmp_path: Path) -> None:
        _workspace(tmp_path)
        path = _package(tmp_path, "a", 'version = "1.0.0"\npublish.workspace = true')
        assert resolve_overrides(tmp_path, path) == Ok(Policy())

    def test_inherited_publish_without_workspace_manifest(self, tmp_path: Path) -> None:
        path = _package(tmp_path, "a", 'version = "1.0.0"\npublish.workspace = true')
        result = resolve_overrides(tmp_path, path)
        assert isinstance(result, Err)
        assert result.error.kind == "manifest_error"
        assert result.error.path == tmp_path / "Cargo.toml"

    def test_missing_package_manifest(self, tmp_path: Path) -> None:
        result = resolve_overrides(tmp_path, tmp_path / "gone" / "Cargo.toml")
        assert isinstance(result, Err)
        assert result.error.kind == "manifest_error"

    def test_virtual_manifest_has_no_overrides(self, tmp_path: Path) -> None:
        _workspace(tmp_path)
        assert resolve_overrides(tmp_path, tmp_path / "Cargo.toml") == Ok(Policy())


class TestWorkspaceManifestReuse:
    def test_workspace_manifest_read_once(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import rel.policy.overrides as overrides_module

        _workspace(tmp_path, "\n[workspace.package]\npublish = false")
        first = _package(tmp_path, "a", 'version = "1.0.0"\npublish.workspace = true')
        second = _package(tmp_path, "b", 'version = "1.0.0"\npublish.workspace = true')

        loaded: list[Path] = []

        def counting_load(path: Path):  # type: ignore[no-untyped-def]
            loaded.append(path)
            return manifest_module.load_manifest(path)

        monkeypatch.setattr(overrides_module, "load_manifest", counting_load)

        overrides = ManifestOverrides(tmp_path)
        assert overrides.derive(first) == Ok(Policy(publish=False))
        assert overrides.derive(second) == Ok(Policy(publish=False))
        assert loaded.count(tmp_path / "Cargo.toml") == 1
