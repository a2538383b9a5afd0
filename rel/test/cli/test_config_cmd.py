"""Tests for the `rel config` command."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from rel.cli.app import app
from rel.cli.context import CLIContext
from rel.core.errors import ErrorCode
from rel.output.console import MockConsole
from rel.policy.resolve import FixedPaths

runner = CliRunner()


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def console(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> MockConsole:
    import rel.cli.commands.config_cmd as config_cmd

    mock = MockConsole()
    paths = FixedPaths(home=tmp_path / "home", config=tmp_path / "config")
    monkeypatch.setattr(config_cmd, "build_context", lambda: CLIContext(console=mock, paths=paths))
    return mock


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    _write(root / "Cargo.toml", '[workspace]\nmembers = ["crates/*"]\n')
    _write(root / "crates" / "a" / "Cargo.toml", '[package]\nname = "a"\nversion = "0.1.0"\n')
    _write(
        root / "crates" / "b" / "Cargo.toml",
        '[package]\nname = "b"\nversion = "0.1.0"\npublish = false\n',
    )
    return root


def _shown(console: MockConsole) -> dict[str, object]:
    return tomllib.loads(console.text)


def test_shows_workspace_defaults(workspace: Path, console: MockConsole) -> None:
    result = runner.invoke(app, ["config", "--workspace-root", str(workspace)])

    assert result.exit_code == 0, result.output
    shown = _shown(console)
    assert shown["consolidate-commits"] is True
    assert shown["pre-release-commit-message"] == "chore: Release"
    assert shown["allow-branch"] == ["*", "!HEAD"]
    assert shown["rate-limit"] == {"new-packages": 5, "existing-packages": 30}


def test_flags_are_applied(workspace: Path, console: MockConsole) -> None:
    result = runner.invoke(
        app,
        [
            "config",
            "--workspace-root",
            str(workspace),
            "--no-push",
            "--sign",
            "--allow-branch",
            "main,release/*",
            "--dependent-version",
            "fix",
            "-Z",
            "workspace-publish",
        ],
    )

    assert result.exit_code == 0, result.output
    shown = _shown(console)
    assert shown["push"] is False
    assert shown["sign-commit"] is True
    assert shown["sign-tag"] is True
    assert shown["allow-branch"] == ["main", "release/*"]
    assert shown["dependent-version"] == "fix"
    assert shown["unstable"] == {"workspace-publish": True}


def test_package_policy_respects_manifest(workspace: Path, console: MockConsole) -> None:
    manifest = workspace / "crates" / "b" / "Cargo.toml"
    result = runner.invoke(
        app,
        ["config", "--workspace-root", str(workspace), "--package", str(manifest), "--publish"],
    )

    assert result.exit_code == 0, result.output
    assert _shown(console)["publish"] is False


def test_bad_policy_file_exits_with_config_error(workspace: Path, console: MockConsole) -> None:
    _write(workspace / "release.toml", "pubish = false")

    result = runner.invoke(app, ["config", "--workspace-root", str(workspace)])

    assert result.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert console.has_error()
    assert "unknown field `pubish`" in console.text


def test_unknown_unstable_feature_is_user_error(workspace: Path, console: MockConsole) -> None:
    result = runner.invoke(
        app, ["config", "--workspace-root", str(workspace), "-Z", "time-travel"]
    )

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "unsupported unstable feature name `time-travel`" in console.text


def test_missing_manifest_is_manifest_error(tmp_path: Path, console: MockConsole) -> None:
    result = runner.invoke(app, ["config", "--workspace-root", str(tmp_path)])

    assert result.exit_code == int(ErrorCode.MANIFEST_ERROR)
    assert console.has_error()


def test_isolated_ignores_user_config(
    workspace: Path, tmp_path: Path, console: MockConsole
) -> None:
    _write(tmp_path / "home" / ".release.toml", 'push-remote = "home"')

    result = runner.invoke(app, ["config", "--workspace-root", str(workspace), "--isolated"])

    assert result.exit_code == 0, result.output
    assert _shown(console)["push-remote"] == "origin"


def test_user_config_is_read(workspace: Path, tmp_path: Path, console: MockConsole) -> None:
    _write(tmp_path / "config" / "cargo-release" / "release.toml", 'push-remote = "up"')

    result = runner.invoke(app, ["config", "--workspace-root", str(workspace)])

    assert result.exit_code == 0, result.output
    assert _shown(console)["push-remote"] == "up"
