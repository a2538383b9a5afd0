"""Error types for registry index queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rel.core.errors import ErrorCode

__all__ = ["RegistryError", "RegistryErrorKind"]

RegistryErrorKind = Literal[
    "network",
    "http_status",
    "malformed_body",
    "invalid_name",
]


@dataclass(frozen=True, slots=True)
class RegistryError:
    """Why the index could not answer.

    Attributes:
        kind: Failure class
        message: Human-readable error message
        url: The URL that failed, when a request was made
        status: HTTP status code (0 when no response was received)
    """

    kind: RegistryErrorKind
    message: str
    url: str | None = None
    status: int = 0

    def __str__(self) -> str:
        text = f"HTTP {self.status}: {self.message}" if self.status else self.message
        if self.url:
            return f"{text} ({self.url})"
        return text

    @property
    def exit_code(self) -> ErrorCode:
        if self.kind == "invalid_name":
            return ErrorCode.USER_ERROR
        return ErrorCode.NETWORK_ERROR
