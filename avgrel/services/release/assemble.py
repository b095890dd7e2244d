"""Bundle assembly.

Every platform build directory gets its ``engine.json`` pointed at the new
release, then the directory is copied to ``<staging>/bundle/<platform>``.
A ``bundle-info.json`` manifest is written last.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from avgrel.core.result import Err, Ok, Result
from avgrel.core.structured import as_str_dict
from avgrel.output.console import ConsoleProtocol
from avgrel.platform.files import atomic_write_json, atomic_write_text, replace_tree, reset_dir
from avgrel.services.release.errors import (
    ConfigInvalid,
    ConfigNotFound,
    CopyFailed,
    ReleaseError,
)
from avgrel.services.release.model import (
    ENGINE_CONFIG_NAME,
    BuildResult,
    BuildTarget,
    BundleManifest,
    StagingTree,
)


def engine_config_values(*, version: str, engine_base_url: str, assets_base_url: str) -> dict[str, str]:
    """The three keys of engine.json owned by the release tool."""
    return {
        "URL": f"{engine_base_url.rstrip('/')}/{version}",
        "game_assets_root": assets_base_url,
        "version": version,
    }


def rewrite_engine_config(
    target: BuildTarget,
    *,
    version: str,
    engine_base_url: str,
    assets_base_url: str,
) -> Result[Path, ReleaseError]:
    """Point the build's engine.json at ``version``; other keys are left as-is."""
    path = target.output_dir / ENGINE_CONFIG_NAME
    if not path.is_file():
        return Err(ConfigNotFound(platform=target.platform, path=path))

    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(ConfigInvalid(platform=target.platform, path=path, reason=str(e)))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(ConfigInvalid(platform=target.platform, path=path, reason=f"invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigInvalid(platform=target.platform, path=path, reason="root is not an object"))

    data.update(
        engine_config_values(
            version=version,
            engine_base_url=engine_base_url,
            assets_base_url=assets_base_url,
        )
    )

    try:
        atomic_write_json(path, data)
    except OSError as e:
        return Err(ConfigInvalid(platform=target.platform, path=path, reason=f"failed to write: {e}"))
    return Ok(path)


class BundleAssembler:
    def __init__(
        self,
        *,
        product: str,
        engine_base_url: str,
        assets_base_url: str,
        console: ConsoleProtocol,
    ) -> None:
        self._product = product
        self._engine_base_url = engine_base_url
        self._assets_base_url = assets_base_url
        self._console = console

    def assemble(
        self,
        results: Sequence[BuildResult],
        *,
        version: str,
        staging_root: Path,
    ) -> Result[StagingTree, ReleaseError]:
        """Build a fresh staging tree from successful build results.

        The staging root is purged first. On error the tree may hold partial
        content; callers must not package it.
        """
        staging = StagingTree(root=staging_root)

        self._console.step(f"preparing staging directory {staging_root}")
        try:
            reset_dir(staging.root)
        except OSError as e:
            return Err(CopyFailed(platform=None, path=staging.root, reason=str(e)))

        for result in results:
            target = result.target
            self._console.step(f"processing {target.platform} ...")

            rewritten = rewrite_engine_config(
                target,
                version=version,
                engine_base_url=self._engine_base_url,
                assets_base_url=self._assets_base_url,
            )
            if isinstance(rewritten, Err):
                return rewritten

            dest = staging.platform_dir(target.platform)
            try:
                replace_tree(target.output_dir, dest)
            except OSError as e:
                return Err(CopyFailed(platform=target.platform, path=dest, reason=str(e)))

        manifest = BundleManifest.for_release(product=self._product, version=version)
        try:
            atomic_write_text(staging.manifest_path, manifest.to_json())
        except OSError as e:
            return Err(CopyFailed(platform=None, path=staging.manifest_path, reason=str(e)))

        return Ok(staging)
