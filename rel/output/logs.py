"""Process-wide logging setup, done once by the command line."""

from __future__ import annotations

import logging

__all__ = ["configure_logging"]


def configure_logging(verbose: bool) -> None:
    """Route `rel.*` loggers through Rich; DEBUG when verbose, else WARNING."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_time=False, show_path=False)],
        force=True,
    )
