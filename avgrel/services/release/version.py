"""Version record of the host project.

The version lives in the ``version`` field of the project's ``package.json``.
It is read once per run and, unless the run is a dev package, rewritten once
with the bumped value before any build starts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from avgrel.core.result import Err, Ok, Result
from avgrel.core.structured import as_str_dict, get_str
from avgrel.platform.files import atomic_write_json
from avgrel.services.release.errors import (
    InvalidBumpKind,
    InvalidIdentifier,
    InvalidVersionFormat,
    ReleaseError,
    VersionFileError,
)
from avgrel.services.release.model import BUMP_KINDS, BumpKind
from avgrel.services.release.semver import SemVer, is_valid_identifier, parse_version


@dataclass(frozen=True, slots=True)
class VersionInfo:
    original: SemVer
    next: SemVer


def compute_next_version(
    current: str,
    bump: str,
    identifier: str,
    *,
    is_dev: bool,
) -> Result[VersionInfo, ReleaseError]:
    """Compute ``(original, next)`` without touching the disk.

    Dev runs keep the current version so the pipeline can be exercised
    repeatedly without polluting the version lineage.
    """
    parsed = parse_version(current)
    if parsed is None:
        return Err(InvalidVersionFormat(value=current))

    if bump not in BUMP_KINDS:
        return Err(InvalidBumpKind(value=bump, available=BUMP_KINDS))

    if not is_valid_identifier(identifier):
        return Err(InvalidIdentifier(value=identifier))

    if is_dev:
        return Ok(VersionInfo(original=parsed, next=parsed))

    return Ok(VersionInfo(original=parsed, next=parsed.bump(cast(BumpKind, bump), identifier)))


def _read_record(path: Path) -> Result[dict[str, object], ReleaseError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(VersionFileError(path=path, reason=f"failed to read: {e}"))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(VersionFileError(path=path, reason=f"invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(VersionFileError(path=path, reason="JSON root is not an object"))
    return Ok(data)


def update_version(
    path: Path,
    bump: str,
    identifier: str,
    *,
    is_dev: bool,
) -> Result[VersionInfo, ReleaseError]:
    """Bump the version stored in ``path``.

    The record is rewritten as a whole (temp file + replace) with its key
    order kept, and only when ``is_dev`` is false.
    """
    record = _read_record(path)
    if isinstance(record, Err):
        return record

    data = record.value
    current = get_str(data, "version")
    if current is None:
        return Err(VersionFileError(path=path, reason="missing version field"))

    info = compute_next_version(current, bump, identifier, is_dev=is_dev)
    if isinstance(info, Err) or is_dev:
        return info

    data["version"] = str(info.value.next)
    try:
        atomic_write_json(path, data)
    except OSError as e:
        return Err(VersionFileError(path=path, reason=f"failed to write: {e}"))

    return info
