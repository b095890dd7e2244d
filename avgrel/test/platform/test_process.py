"""Tests for avgrel.platform.process module."""

from __future__ import annotations

import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

from avgrel.core.result import Err, Ok
from avgrel.platform.process import ProcessError, stream_process


def _run(cmd: list[str], cwd: Path, timeout: float | None = None):
    lines: list[tuple[str, bool]] = []

    def on_line(line: str, is_stderr: bool) -> None:
        lines.append((line, is_stderr))

    result = asyncio.run(stream_process(cmd, cwd=cwd, on_line=on_line, timeout=timeout))
    return result, lines


class TestProcessError:
    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(command=("yarn", "run", "build", "--prod"), returncode=127, message="not found")
        assert str(error) == "yarn run build ...: not found"


class TestStreamProcess:
    def test_exit_code_and_lines(self, tmp_path: Path) -> None:
        script = "import sys; print('one'); print('two'); sys.stderr.write('oops\\n'); sys.exit(4)"
        result, lines = _run([sys.executable, "-c", script], tmp_path)

        assert result == Ok(4)
        assert ("one", False) in lines
        assert ("two", False) in lines
        assert ("oops", True) in lines
        assert [line for line, err in lines if not err] == ["one", "two"]

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x", encoding="utf-8")
        result, lines = _run([sys.executable, "-c", "import os; print(os.listdir('.'))"], tmp_path)

        assert result == Ok(0)
        assert any("marker.txt" in line for line, _ in lines)

    def test_command_not_found(self, tmp_path: Path) -> None:
        result, _ = _run(["nonexistent_command_12345"], tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 127

    def test_timeout(self, tmp_path: Path) -> None:
        result, _ = _run([sys.executable, "-c", "import time; time.sleep(30)"], tmp_path, timeout=0.5)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.message

    def test_cancel_kills_process(self, tmp_path: Path) -> None:
        marker = tmp_path / "finished.txt"
        script = f"import time; time.sleep(5); open({str(marker)!r}, 'w').close()"

        async def go() -> None:
            task = asyncio.create_task(
                stream_process([sys.executable, "-c", script], cwd=tmp_path, on_line=lambda *_: None)
            )
            await asyncio.sleep(0.5)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            assert task.cancelled()

        asyncio.run(go())
        assert not marker.exists()

    def test_line_longer_than_stream_limit(self, tmp_path: Path) -> None:
        script = "import sys; sys.stdout.write('x' * 200000); sys.stdout.flush()"
        result, lines = _run([sys.executable, "-c", script], tmp_path)

        assert result == Ok(0)
        assert lines == [("x" * 200000, False)]

    def test_carriage_returns_stay_on_one_line(self, tmp_path: Path) -> None:
        script = "import sys; sys.stdout.write('10%\\r50%\\r100%\\r\\ndone\\n')"
        result, lines = _run([sys.executable, "-c", script], tmp_path)

        assert result == Ok(0)
        assert [line for line, _ in lines] == ["10%\r50%\r100%", "done"]

    @pytest.mark.skipif(sys.platform == "win32", reason="signal 0 liveness check needs POSIX")
    def test_failing_callback_kills_process(self, tmp_path: Path) -> None:
        script = "import os, time; print(os.getpid(), flush=True); time.sleep(30)"
        pids: list[int] = []

        def on_line(line: str, is_stderr: bool) -> None:
            pids.append(int(line))
            raise RuntimeError("rejected")

        started = time.monotonic()
        with pytest.raises(RuntimeError, match="rejected"):
            asyncio.run(stream_process([sys.executable, "-c", script], cwd=tmp_path, on_line=on_line))

        assert time.monotonic() - started < 20.0
        with pytest.raises(ProcessLookupError):
            os.kill(pids[0], 0)
