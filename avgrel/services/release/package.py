"""Release archive creation."""

from __future__ import annotations

import os
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from avgrel.core.result import Err, Ok, Result
from avgrel.services.release.errors import ArchiveWriteFailed, ReleaseError


def archive_name(product: str, version: str) -> str:
    return f"{product}-v{version}.zip"


def _collect_entries(root: Path) -> list[tuple[Path, str]]:
    # directories are listed too so that empty ones survive extraction
    return [
        (p, p.relative_to(root).as_posix())
        for p in sorted(root.rglob("*"))
        if p.is_file() or p.is_dir()
    ]


def package(staging_root: Path, output_path: Path) -> Result[Path, ReleaseError]:
    """Zip everything under ``staging_root`` into ``output_path``.

    Archive members are relative to the staging root. The output directory
    must already exist; it is not created here.
    """
    parent = output_path.parent
    if not parent.is_dir():
        return Err(ArchiveWriteFailed(path=output_path, reason=f"directory does not exist: {parent}"))
    if not os.access(parent, os.W_OK):
        return Err(ArchiveWriteFailed(path=output_path, reason=f"directory is not writable: {parent}"))

    try:
        entries = _collect_entries(staging_root)
        # Build outputs may carry mtime=0 (1970); ZIP cannot store dates before 1980.
        with ZipFile(output_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
            for src, arc in entries:
                zf.write(src, arcname=arc)
    except OSError as e:
        output_path.unlink(missing_ok=True)
        return Err(ArchiveWriteFailed(path=output_path, reason=str(e)))

    return Ok(output_path)
