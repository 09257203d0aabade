"""Error codes for CLI exit status.

These values are used as process exit codes and should remain stable:
- 0: Success
- 1: User error (invalid release type/version, wrong branch, declined prompt)
- 2: Environment error (dirty tree, out of sync, missing config, no usable tag)
- 3: Release failed (a module flow or the release publication failed)
- 4: Sync error (module requirements differ from the root manifest)
- 5: I/O error (manifest cannot be read or written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_FAILED = 3
    SYNC_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
