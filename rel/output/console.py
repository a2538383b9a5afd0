"""Console output abstraction.

Commands print through `ConsoleProtocol` so tests can capture output with
`MockConsole` instead of parsing a terminal. Results go to stdout; errors
and warnings go to stderr so `rel config > release.toml` stays clean.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
]


class Style(Enum):
    """Text styles, valued by their Rich style string."""

    DEFAULT = ""
    SUCCESS = "green"
    ERROR = "red bold"
    WARNING = "yellow"
    DIM = "dim"

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def raw(self, text: str) -> None:
        """Print text verbatim, without markup or highlighting (e.g. TOML)."""
        ...


class RichConsole:
    """Console backed by two Rich consoles (stdout and stderr)."""

    def __init__(self) -> None:
        from rich.console import Console

        self._out = Console(highlight=False, emoji=False)
        self._err = Console(stderr=True, highlight=False, emoji=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._out.print(message, style=style.value or None, markup=False)

    def error(self, message: str) -> None:
        self._labelled("error", Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._labelled("warning", Style.WARNING, message)

    def raw(self, text: str) -> None:
        self._out.print(text, markup=False, end="", soft_wrap=True)

    def _labelled(self, label: str, style: Style, message: str) -> None:
        from rich.text import Text

        line = Text(f"{label}:", style=style.value)
        line.append(f" {message}")
        self._err.print(line)


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that records output for assertions."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def error(self, message: str) -> None:
        self.print(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self.print(f"warning: {message}", Style.WARNING)

    def raw(self, text: str) -> None:
        self.print(text)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style is Style.ERROR for o in self.outputs)
