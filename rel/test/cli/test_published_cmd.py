"""Tests for the `rel published` command."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from rel.cli.app import app
from rel.cli.context import CLIContext
from rel.core.errors import ErrorCode
from rel.core.result import Ok
from rel.output.console import MockConsole
from rel.policy.model import CertsSource
from rel.policy.resolve import FixedPaths
from rel.registry.cache import IndexCache
from rel.registry.errors import RegistryError
from rel.registry.http import IndexResponse, MockIndexTransport
from rel.registry.remote import RemoteIndex

runner = CliRunner()

SERDE_URL = "https://index.crates.io/se/rd/serde"


@pytest.fixture
def transport() -> MockIndexTransport:
    return MockIndexTransport()


@pytest.fixture
def console(monkeypatch: pytest.MonkeyPatch, transport: MockIndexTransport) -> MockConsole:
    import rel.cli.commands.published as published_cmd

    mock = MockConsole()
    monkeypatch.setattr(
        published_cmd, "build_context", lambda: CLIContext(console=mock, paths=FixedPaths())
    )

    def scripted_cache(certs_source: CertsSource = CertsSource.WEBPKI) -> IndexCache:
        return IndexCache(lambda: Ok(RemoteIndex(transport)), certs_source=certs_source)

    monkeypatch.setattr(published_cmd, "IndexCache", scripted_cache)
    return mock


def test_published_package(transport: MockIndexTransport, console: MockConsole) -> None:
    transport.add(SERDE_URL, IndexResponse(200, body=b'{"name": "serde", "vers": "1.0.0"}'))

    result = runner.invoke(app, ["published", "serde"])

    assert result.exit_code == 0, result.output
    assert console.messages == ["published: serde"]
    assert transport.closed


def test_published_version(transport: MockIndexTransport, console: MockConsole) -> None:
    transport.add(SERDE_URL, IndexResponse(200, body=b'{"name": "serde", "vers": "1.0.0"}'))

    result = runner.invoke(app, ["published", "serde", "--version", "1.0.0"])

    assert result.exit_code == 0, result.output
    assert console.messages == ["published: serde 1.0.0"]


def test_missing_version_exits_1(transport: MockIndexTransport, console: MockConsole) -> None:
    transport.add(SERDE_URL, IndexResponse(200, body=b'{"name": "serde", "vers": "1.0.0"}'))

    result = runner.invoke(app, ["published", "serde", "--version", "9.9.9"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert console.messages == ["missing: serde 9.9.9"]


def test_missing_package_exits_1(console: MockConsole) -> None:
    result = runner.invoke(app, ["published", "serde"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert console.messages == ["missing: serde"]


def test_other_registry_is_unknown(transport: MockIndexTransport, console: MockConsole) -> None:
    result = runner.invoke(app, ["published", "serde", "--version", "1.0.0", "--registry", "corp"])

    assert result.exit_code == 0, result.output
    assert console.messages[0].startswith("unknown: serde 1.0.0")
    assert transport.calls == []


def test_network_failure(transport: MockIndexTransport, console: MockConsole) -> None:
    transport.add(SERDE_URL, RegistryError("network", "connection refused", url=SERDE_URL))

    result = runner.invoke(app, ["published", "serde"])

    assert result.exit_code == int(ErrorCode.NETWORK_ERROR)
    assert console.has_error()
    assert transport.closed


def test_invalid_name_is_user_error(console: MockConsole) -> None:
    result = runner.invoke(app, ["published", "not a name"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "invalid package name" in console.text
