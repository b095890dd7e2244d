"""Asynchronous subprocess execution with live output.

Each external command is awaited as a single coroutine that resolves to its
exit code. Output lines are handed to a callback as soon as they are read, so
several commands can run side by side while their logs interleave on the
console.

Usage:
    def on_line(line: str, is_stderr: bool) -> None:
        console.print(line)

    result = await stream_process(["yarn", "build:browser"], cwd=root, on_line=on_line)
    match result:
        case Ok(code):
            print(f"exit {code}")
        case Err(error):
            print(f"could not run: {error}")
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from avgrel.core.result import Err, Ok, Result

__all__ = ["LineSink", "ProcessError", "SPAWN_FAILED_EXIT", "TIMEOUT_EXIT", "stream_process"]

LineSink = Callable[[str, bool], None]

# Shell convention for "command not found / not executable"
SPAWN_FAILED_EXIT = 127
TIMEOUT_EXIT = -1

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not be started or did not finish in time.

    A command that ran and exited non-zero is not a ProcessError; its exit
    code is returned as a regular value.
    """

    command: tuple[str, ...]
    returncode: int
    message: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str}: {self.message}"


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r")


async def _pump(stream: asyncio.StreamReader, on_line: LineSink, is_stderr: bool) -> None:
    # no readline(): it raises on lines longer than the stream limit
    pending = b""
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        *lines, pending = (pending + chunk).split(b"\n")
        for raw in lines:
            on_line(_decode(raw), is_stderr)
    if pending:
        on_line(_decode(pending), is_stderr)


def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is not None:
        return
    try:
        proc.kill()
    except ProcessLookupError:
        pass


async def stream_process(
    cmd: list[str],
    *,
    cwd: Path,
    on_line: LineSink,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> Result[int, ProcessError]:
    """Run ``cmd`` to completion, forwarding stdout/stderr lines to ``on_line``.

    Args:
        cmd: Command and arguments. The program is resolved on PATH first so
            that script shims (``yarn.cmd`` on Windows) are found.
        cwd: Working directory.
        on_line: Called with ``(line, is_stderr)`` for every output line.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit). The process is
            killed when the limit is reached.

    Returns:
        Ok(exit_code) once the process exited, Err(ProcessError) if it could
        not be started or timed out.

    The process is killed when the call ends early, whether by cancellation
    or by an exception raised from ``on_line``.
    """
    program = shutil.which(cmd[0]) or cmd[0]
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *cmd[1:],
            cwd=str(cwd),
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=SPAWN_FAILED_EXIT, message=str(e)))

    assert proc.stdout is not None and proc.stderr is not None

    try:
        async with asyncio.timeout(timeout):
            await asyncio.gather(
                _pump(proc.stdout, on_line, False),
                _pump(proc.stderr, on_line, True),
            )
            code = await proc.wait()
    except TimeoutError:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=TIMEOUT_EXIT,
                message=f"timed out after {timeout}s",
            )
        )
    finally:
        # the child never outlives this call
        if proc.returncode is None:
            _kill(proc)
            await proc.wait()

    return Ok(code)
