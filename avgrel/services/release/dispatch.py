"""Concurrent platform builds.

Each platform build is an opaque external command (``yarn build:<platform>``
by default) that writes a directory tree. The dispatcher starts all of them at
once and hands back one task per platform; joining them is the barrier's job.
"""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Iterable
from pathlib import Path

from avgrel.core.config import BuildConfig
from avgrel.core.result import Err
from avgrel.output.console import ConsoleProtocol, Style
from avgrel.platform.process import stream_process
from avgrel.services.release.model import BuildResult, BuildTarget, Platform


class BuildDispatcher:
    """Start one build process per target and stream its output."""

    def __init__(
        self,
        *,
        project_root: Path,
        build: BuildConfig,
        console: ConsoleProtocol,
        env: dict[str, str] | None = None,
    ) -> None:
        self._root = project_root
        self._build = build
        self._console = console
        self._env = env

    def targets_for(self, platforms: Iterable[Platform]) -> list[BuildTarget]:
        return [
            BuildTarget(platform=p, output_dir=self._build.output_dir_for(self._root, p.value))
            for p in platforms
        ]

    def command_for(self, platform: Platform) -> list[str]:
        return shlex.split(self._build.command_for(platform.value))

    def dispatch(self, targets: Iterable[BuildTarget]) -> dict[Platform, asyncio.Task[BuildResult]]:
        """Start every build now; must be called from a running event loop."""
        tasks: dict[Platform, asyncio.Task[BuildResult]] = {}
        for target in targets:
            self._console.step(f"building {target.platform} ...")
            tasks[target.platform] = asyncio.create_task(
                self._run(target), name=f"build:{target.platform}"
            )
        return tasks

    async def _run(self, target: BuildTarget) -> BuildResult:
        platform = target.platform
        cmd = self.command_for(platform)
        self._console.print(" ".join(cmd), Style.DIM)

        def on_line(line: str, is_stderr: bool) -> None:
            self._console.print(f"[{platform}] {line}", Style.WARNING if is_stderr else Style.DIM)

        result = await stream_process(
            cmd,
            cwd=self._root,
            on_line=on_line,
            env=self._env,
            timeout=self._build.timeout_seconds,
        )
        if isinstance(result, Err):
            self._console.error(f"{platform}: {result.error}")
            return BuildResult(target=target, exit_code=result.error.returncode)

        build = BuildResult(target=target, exit_code=result.value)
        if build.succeeded:
            self._console.success(f"{platform} built")
        else:
            self._console.error(f"{platform} build failed (exit {build.exit_code})")
        return build
