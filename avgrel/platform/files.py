"""Filesystem helpers."""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "atomic_write_json", "replace_tree", "reset_dir"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    The temp file lives next to the target so ``os.replace`` never crosses a
    filesystem boundary. A reader sees either the old or the new content.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def atomic_write_json(path: Path, data: object) -> None:
    """Write ``data`` as 2-space indented JSON, preserving key order."""
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def reset_dir(path: Path) -> None:
    """Remove ``path`` with everything below it, then recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def replace_tree(src: Path, dst: Path) -> None:
    """Copy the directory ``src`` to ``dst``, dropping whatever was at ``dst``."""
    if dst.exists():
        shutil.rmtree(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dst)
