"""Error codes for CLI exit status.

The numeric values are used as process exit codes and should remain stable:
- 0: Success
- 1: User error (bad option, unknown bump kind, malformed version or identifier)
- 3: Build error (a platform build exited non-zero)
- 4: Network error (remote host unreachable, remote operation failed)
- 5: I/O error (missing config, copy failure, archive not writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
