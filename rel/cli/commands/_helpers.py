"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from rel.core.result import Err, Result
from rel.policy.errors import PolicyError
from rel.registry.errors import RegistryError

if TYPE_CHECKING:
    from rel.cli.context import CLIContext


def unwrap_or_exit[T](result: Result[T, PolicyError | RegistryError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code."""
    if isinstance(result, Err):
        error = result.error
        ctx.console.error(error.pretty() if isinstance(error, PolicyError) else str(error))
        exit_with_code(int(error.exit_code))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
