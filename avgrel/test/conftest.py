from __future__ import annotations

import json
import os
import shlex
import sys
from dataclasses import dataclass, replace
from pathlib import Path

import pytest

from avgrel.core.config import BuildConfig, ReleaseConfig

# Stand-in for `yarn build:<platform>`: writes dist/<platform> with an engine.json.
BUILD_SCRIPT = """\
import json
import os
import sys
import time
from pathlib import Path

platform = sys.argv[1]
print(f"building {platform}", flush=True)
print(f"warning from {platform}", file=sys.stderr, flush=True)
if platform in os.environ.get("SLOW_PLATFORMS", "").split(","):
    time.sleep(30)
if platform in os.environ.get("FAIL_PLATFORMS", "").split(","):
    sys.exit(3)
out = Path("dist") / platform
(out / "assets").mkdir(parents=True, exist_ok=True)
engine = {"URL": "http://localhost", "debug": True, "game_assets_root": "", "version": "0.0.0"}
(out / "engine.json").write_text(json.dumps(engine), encoding="utf-8")
(out / "index.html").write_text(f"<html>{platform}</html>", encoding="utf-8")
(out / "assets" / "engine.js").write_text(f"// {platform}", encoding="utf-8")
"""


@dataclass(frozen=True)
class FakeProject:
    root: Path

    @property
    def package_json(self) -> Path:
        return self.root / "package.json"

    def config(self, *, timeout_seconds: float | None = None) -> ReleaseConfig:
        build = BuildConfig(
            command=f"{shlex.quote(sys.executable)} build.py {{platform}}",
            timeout_seconds=timeout_seconds,
        )
        return replace(ReleaseConfig(), build=build)

    def env(self, *, fail: tuple[str, ...] = (), slow: tuple[str, ...] = ()) -> dict[str, str]:
        env = dict(os.environ)
        env["FAIL_PLATFORMS"] = ",".join(fail)
        env["SLOW_PLATFORMS"] = ",".join(slow)
        return env

    def version(self) -> str:
        return json.loads(self.package_json.read_text(encoding="utf-8"))["version"]


@pytest.fixture
def project(tmp_path: Path) -> FakeProject:
    root = tmp_path / "engine"
    root.mkdir()
    (root / "build.py").write_text(BUILD_SCRIPT, encoding="utf-8")
    (root / "package.json").write_text(
        json.dumps({"name": "avg-engine", "version": "1.2.3"}, indent=2) + "\n",
        encoding="utf-8",
    )
    return FakeProject(root=root)
