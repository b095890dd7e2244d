from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from avgrel.services.release.model import Platform


@dataclass(frozen=True, slots=True)
class InvalidVersionFormat:
    value: str


@dataclass(frozen=True, slots=True)
class InvalidBumpKind:
    value: str
    available: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class InvalidIdentifier:
    value: str


@dataclass(frozen=True, slots=True)
class VersionFileError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class BuildFailed:
    platform: Platform
    exit_code: int


@dataclass(frozen=True, slots=True)
class ConfigNotFound:
    platform: Platform
    path: Path


@dataclass(frozen=True, slots=True)
class ConfigInvalid:
    platform: Platform
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class CopyFailed:
    platform: Platform | None
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class RemoteConnectFailed:
    host: str
    reason: str


@dataclass(frozen=True, slots=True)
class RemoteOperationFailed:
    op: str
    path: str
    reason: str


@dataclass(frozen=True, slots=True)
class ArchiveWriteFailed:
    path: Path
    reason: str


ReleaseError = (
    InvalidVersionFormat
    | InvalidBumpKind
    | InvalidIdentifier
    | VersionFileError
    | BuildFailed
    | ConfigNotFound
    | ConfigInvalid
    | CopyFailed
    | RemoteConnectFailed
    | RemoteOperationFailed
    | ArchiveWriteFailed
)
