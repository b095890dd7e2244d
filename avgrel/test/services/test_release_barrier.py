from __future__ import annotations

import asyncio
import time
from pathlib import Path

from avgrel.core.result import Err, Ok
from avgrel.output.console import MockConsole
from avgrel.services.release.barrier import CompletionBarrier
from avgrel.services.release.dispatch import BuildDispatcher
from avgrel.services.release.errors import BuildFailed
from avgrel.services.release.model import BuildResult, BuildTarget, Platform

from conftest import FakeProject


def _result(platform: Platform, code: int) -> BuildResult:
    return BuildResult(target=BuildTarget(platform, Path("dist") / platform.value), exit_code=code)


async def _finish(platform: Platform, code: int, delay: float) -> BuildResult:
    await asyncio.sleep(delay)
    return _result(platform, code)


def test_returns_one_result_per_build() -> None:
    async def go():
        tasks = [
            asyncio.create_task(_finish(Platform.DESKTOP, 0, 0.05)),
            asyncio.create_task(_finish(Platform.BROWSER, 0, 0.0)),
        ]
        return await CompletionBarrier().await_all(tasks)

    result = asyncio.run(go())

    assert isinstance(result, Ok)
    assert sorted(r.platform for r in result.value) == [Platform.BROWSER, Platform.DESKTOP]


def test_empty_set_of_builds() -> None:
    result = asyncio.run(CompletionBarrier().await_all([]))
    assert result == Ok([])


def test_first_failure_aborts_and_cancels_pending_builds() -> None:
    async def go():
        slow = asyncio.create_task(_finish(Platform.BROWSER, 0, 10.0))
        failing = asyncio.create_task(_finish(Platform.DESKTOP, 1, 0.0))
        result = await CompletionBarrier().await_all([slow, failing])
        return result, slow

    started = time.monotonic()
    result, slow = asyncio.run(go())

    assert time.monotonic() - started < 5.0
    assert isinstance(result, Err)
    assert result.error == BuildFailed(platform=Platform.DESKTOP, exit_code=1)
    assert slow.cancelled()


def test_successful_results_are_discarded_on_failure() -> None:
    async def go():
        tasks = [
            asyncio.create_task(_finish(Platform.BROWSER, 0, 0.0)),
            asyncio.create_task(_finish(Platform.DESKTOP, 2, 0.05)),
        ]
        return await CompletionBarrier().await_all(tasks)

    result = asyncio.run(go())

    assert isinstance(result, Err)
    assert isinstance(result.error, BuildFailed)
    assert result.error.exit_code == 2


def test_failed_build_kills_running_processes(project: FakeProject) -> None:
    dispatcher = BuildDispatcher(
        project_root=project.root,
        build=project.config().build,
        console=MockConsole(),
        env=project.env(fail=("browser",), slow=("desktop",)),
    )

    async def go():
        tasks = dispatcher.dispatch(dispatcher.targets_for((Platform.BROWSER, Platform.DESKTOP)))
        return await CompletionBarrier().await_all(list(tasks.values()))

    started = time.monotonic()
    result = asyncio.run(go())

    assert time.monotonic() - started < 20.0
    assert isinstance(result, Err)
    assert result.error == BuildFailed(platform=Platform.BROWSER, exit_code=3)
    assert not (project.root / "dist" / "desktop").exists()
