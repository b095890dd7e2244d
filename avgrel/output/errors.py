"""Error presentation utilities.

Centralized error formatting and exit code mapping for the release command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from avgrel.core.errors import ErrorCode
from avgrel.output.console import Style
from avgrel.services.release.errors import (
    ArchiveWriteFailed,
    BuildFailed,
    ConfigInvalid,
    ConfigNotFound,
    CopyFailed,
    InvalidBumpKind,
    InvalidIdentifier,
    InvalidVersionFormat,
    ReleaseError,
    RemoteConnectFailed,
    RemoteOperationFailed,
    VersionFileError,
)

if TYPE_CHECKING:
    from avgrel.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with a hint where one helps."""
    match error:
        case InvalidVersionFormat(value=value):
            console.error(f"invalid version in version file: {value!r}")
            console.print("hint: expected MAJOR.MINOR.PATCH[-PRERELEASE]", Style.DIM)
        case InvalidBumpKind(value=value, available=available):
            console.error(f"unknown version bump: {value}")
            console.print(f"Available: {', '.join(available)}", Style.DIM)
        case InvalidIdentifier(value=value):
            console.error(f"invalid pre-release identifier: {value!r}")
            console.print("hint: use letters, digits and hyphens, e.g. alpha or rc-1", Style.DIM)
        case VersionFileError(path=path, reason=reason):
            console.error(f"version file {path}: {reason}")
        case BuildFailed(platform=platform, exit_code=code):
            console.error(f"{platform} build failed (exit {code})")
            console.print("hint: no bundle was assembled; the version bump was kept", Style.DIM)
        case ConfigNotFound(platform=platform, path=path):
            console.error(f"{platform}: engine config not found: {path}")
        case ConfigInvalid(platform=platform, path=path, reason=reason):
            console.error(f"{platform}: invalid engine config {path} ({reason})")
        case CopyFailed(platform=platform, path=path, reason=reason):
            where = f"{platform}: " if platform is not None else ""
            console.error(f"{where}copy to {path} failed ({reason})")
        case RemoteConnectFailed(host=host, reason=reason):
            console.error(f"cannot connect to {host}: {reason}")
        case RemoteOperationFailed(op=op, path=path, reason=reason):
            console.error(f"remote {op} failed for {path}: {reason}")
        case ArchiveWriteFailed(path=path, reason=reason):
            console.error(f"cannot write archive {path}: {reason}")


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error:
        case InvalidVersionFormat() | InvalidBumpKind() | InvalidIdentifier():
            return int(ErrorCode.USER_ERROR)
        case BuildFailed():
            return int(ErrorCode.BUILD_ERROR)
        case RemoteConnectFailed() | RemoteOperationFailed():
            return int(ErrorCode.NETWORK_ERROR)
        case (
            VersionFileError()
            | ConfigNotFound()
            | ConfigInvalid()
            | CopyFailed()
            | ArchiveWriteFailed()
        ):
            return int(ErrorCode.IO_ERROR)
