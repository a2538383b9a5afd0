from __future__ import annotations

from dataclasses import dataclass

from rel.output.console import ConsoleProtocol, RichConsole
from rel.policy.resolve import PathProvider, SystemPaths


@dataclass(frozen=True, slots=True)
class CLIContext:
    console: ConsoleProtocol
    paths: PathProvider


def build_context() -> CLIContext:
    return CLIContext(console=RichConsole(), paths=SystemPaths())
