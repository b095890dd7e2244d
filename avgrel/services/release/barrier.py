"""Join point between the concurrent builds and the sequential assembly."""

from __future__ import annotations

import asyncio
from collections.abc import Collection

from avgrel.core.result import Err, Ok, Result
from avgrel.services.release.errors import BuildFailed, ReleaseError
from avgrel.services.release.model import BuildResult


class CompletionBarrier:
    """Wait for every build, failing fast on the first unsuccessful one.

    When a build fails, results already collected are discarded and builds
    still running are cancelled (which kills their processes): a half-built
    release is never assembled.
    """

    async def await_all(
        self, builds: Collection[asyncio.Future[BuildResult]]
    ) -> Result[list[BuildResult], ReleaseError]:
        pending: set[asyncio.Future[BuildResult]] = set(builds)
        results: list[BuildResult] = []
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for fut in sorted(done, key=_platform_of):
                    result = fut.result()
                    if not result.succeeded:
                        return Err(BuildFailed(platform=result.platform, exit_code=result.exit_code))
                    results.append(result)
        finally:
            await _cancel_all(pending)
        return Ok(results)


def _platform_of(fut: asyncio.Future[BuildResult]) -> str:
    # failed futures sort first so their exception surfaces before any result
    if fut.cancelled() or fut.exception() is not None:
        return ""
    return fut.result().platform.value


async def _cancel_all(futures: set[asyncio.Future[BuildResult]]) -> None:
    if not futures:
        return
    for fut in futures:
        fut.cancel()
    await asyncio.gather(*futures, return_exceptions=True)
