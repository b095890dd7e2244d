"""Release orchestration.

Stages run in a fixed order, each gated on the previous one succeeding:

1. version bump (skipped for dev packages)
2. platform builds, all started at once
3. barrier: every build must succeed
4. bundle assembly into the staging directory
5. optional upload of the browser bundle
6. archive of the staging directory

The first error ends the run. A version bump made in step 1 is kept even when
a later stage fails.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from avgrel.core.config import ReleaseConfig, RemoteConfig
from avgrel.core.result import Err, Ok, Result
from avgrel.output.console import ConsoleProtocol
from avgrel.services.release.assemble import BundleAssembler
from avgrel.services.release.barrier import CompletionBarrier
from avgrel.services.release.deploy import Deployer, RemoteClient, SftpClient
from avgrel.services.release.dispatch import BuildDispatcher
from avgrel.services.release.errors import ReleaseError
from avgrel.services.release.model import ReleaseOptions, StagingTree, platforms_for
from avgrel.services.release.package import archive_name, package
from avgrel.services.release.version import VersionInfo, update_version

RemoteClientFactory = Callable[[RemoteConfig], RemoteClient]


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    version: VersionInfo
    staging: StagingTree
    archive: Path
    remote_path: str | None


class ReleasePipeline:
    def __init__(
        self,
        *,
        options: ReleaseOptions,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        remote_client_factory: RemoteClientFactory = SftpClient,
        env: dict[str, str] | None = None,
    ) -> None:
        self._options = options
        self._config = config
        self._console = console
        self._remote_client_factory = remote_client_factory
        self._env = env

    @property
    def version_file(self) -> Path:
        return self._options.project_root / self._config.version_file

    @property
    def staging_root(self) -> Path:
        return self._options.project_root / self._config.staging_dir

    def run(self) -> Result[ReleaseOutcome, ReleaseError]:
        return asyncio.run(self.run_async())

    async def run_async(self) -> Result[ReleaseOutcome, ReleaseError]:
        opts = self._options
        cfg = self._config

        if opts.is_dev:
            self._console.step("dev package: version left unchanged")
        else:
            self._console.step("updating version ...")
        bumped = update_version(self.version_file, opts.bump, opts.identifier, is_dev=opts.is_dev)
        if isinstance(bumped, Err):
            return bumped
        info = bumped.value
        version = str(info.next)
        self._console.header(f"{cfg.product} {info.next.to_tag()}")
        self._console.info(f"version: {info.original} -> {info.next.to_tag()}")

        dispatcher = BuildDispatcher(
            project_root=opts.project_root,
            build=cfg.build,
            console=self._console,
            env=self._env,
        )
        targets = dispatcher.targets_for(platforms_for(opts.platform))
        builds = dispatcher.dispatch(targets)

        joined = await CompletionBarrier().await_all(list(builds.values()))
        if isinstance(joined, Err):
            return joined
        order = list(builds)
        results = sorted(joined.value, key=lambda r: order.index(r.platform))

        assembler = BundleAssembler(
            product=cfg.product,
            engine_base_url=cfg.urls.engine,
            assets_base_url=cfg.urls.assets,
            console=self._console,
        )
        assembled = assembler.assemble(results, version=version, staging_root=self.staging_root)
        if isinstance(assembled, Err):
            return assembled
        staging = assembled.value

        remote_path: str | None = None
        if opts.upload:
            deployer = Deployer(
                self._remote_client_factory(cfg.remote),
                remote_root=cfg.remote.root,
                console=self._console,
            )
            deployed = deployer.deploy(staging, version)
            if isinstance(deployed, Err):
                return deployed
            remote_path = deployed.value

        output = opts.output_dir / archive_name(cfg.product, version)
        self._console.step(f"writing {output} ...")
        packaged = package(staging.root, output)
        if isinstance(packaged, Err):
            return packaged

        self._console.success(f"release {info.next.to_tag()} done: {packaged.value}")
        return Ok(
            ReleaseOutcome(
                version=info,
                staging=staging,
                archive=packaged.value,
                remote_path=remote_path,
            )
        )
