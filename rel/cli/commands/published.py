from __future__ import annotations

import typer

from rel.cli.commands._helpers import exit_with_code, unwrap_or_exit
from rel.cli.context import build_context
from rel.core.errors import ErrorCode
from rel.output.console import Style
from rel.policy.model import CertsSource
from rel.registry.cache import IndexCache


def published(
    name: str = typer.Argument(..., help="Package name."),
    version: str | None = typer.Option(None, "--version", help="Check for this exact version."),
    registry: str | None = typer.Option(
        None, "--registry", metavar="NAME", help="Registry name (only the default is queryable)."
    ),
    certs_source: CertsSource = typer.Option(CertsSource.WEBPKI, "--certs-source"),
) -> None:
    """Check whether a package (version) is in the registry index.

    Prints `published`, `missing` or `unknown`; exits 1 only for `missing`.
    """
    ctx = build_context()
    index = IndexCache(certs_source=certs_source)
    try:
        if version is None:
            found: bool | None = (
                None if registry is not None else unwrap_or_exit(index.has_package(registry, name), ctx)
            )
        else:
            found = unwrap_or_exit(index.has_package_version(registry, name, version), ctx)
    finally:
        index.close()

    label = f"{name} {version}" if version else name
    if found is None:
        ctx.console.print(f"unknown: {label} (registry `{registry}` cannot be queried)", Style.WARNING)
        return
    if found:
        ctx.console.print(f"published: {label}", Style.SUCCESS)
        return
    ctx.console.print(f"missing: {label}", Style.DIM)
    exit_with_code(int(ErrorCode.USER_ERROR))
