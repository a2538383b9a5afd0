"""Release policy resolution and registry state for Cargo workspaces."""

__version__ = "0.1.0"
