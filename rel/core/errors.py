"""Exit codes for the `rel` command line.

Each failure class of the policy and registry layers maps onto one of these
codes, so scripts driving a release can tell a bad flag from a broken
manifest or an unreachable index.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad flag, unknown unstable feature)
    - 2: Config error (malformed release.toml or embedded policy table)
    - 3: Manifest error (malformed or unreadable Cargo.toml)
    - 4: Network error (index unreachable, unexpected status, bad body)
    - 5: I/O error (file not readable)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    MANIFEST_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
