"""Error types for policy resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rel.core.errors import ErrorCode

__all__ = ["PolicyError", "PolicyErrorKind"]

PolicyErrorKind = Literal[
    "parse_error",
    "unstable_feature",
    "manifest_error",
    "io_error",
]


@dataclass(frozen=True, slots=True)
class PolicyError:
    """A fatal problem with one policy source.

    `path` names the offending file for parse, manifest and I/O errors.
    """

    kind: PolicyErrorKind
    message: str
    path: Path | None = None
    hint: str | None = None

    def pretty(self) -> str:
        text = f"{self.message} ({self.path})" if self.path else self.message
        if self.hint:
            return f"{text} (hint: {self.hint})"
        return text

    @property
    def exit_code(self) -> ErrorCode:
        match self.kind:
            case "parse_error":
                return ErrorCode.CONFIG_ERROR
            case "unstable_feature":
                return ErrorCode.USER_ERROR
            case "manifest_error":
                return ErrorCode.MANIFEST_ERROR
            case "io_error":
                return ErrorCode.IO_ERROR
