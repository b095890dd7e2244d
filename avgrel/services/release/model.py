from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Literal


class Platform(StrEnum):
    BROWSER = "browser"
    DESKTOP = "desktop"


PlatformSelection = Literal["all", "browser", "desktop"]
PLATFORM_SELECTIONS: tuple[str, ...] = ("all", "browser", "desktop")

BumpKind = Literal["major", "premajor", "minor", "preminor", "patch", "prepatch", "prerelease"]
BUMP_KINDS: tuple[str, ...] = (
    "major",
    "premajor",
    "minor",
    "preminor",
    "patch",
    "prepatch",
    "prerelease",
)

ENGINE_CONFIG_NAME = "engine.json"
BUNDLE_DIR_NAME = "bundle"
MANIFEST_NAME = "bundle-info.json"


def platforms_for(selection: PlatformSelection) -> tuple[Platform, ...]:
    """Expand a CLI selection into the platforms to build, in build order."""
    match selection:
        case "all":
            return (Platform.BROWSER, Platform.DESKTOP)
        case "browser":
            return (Platform.BROWSER,)
        case "desktop":
            return (Platform.DESKTOP,)


@dataclass(frozen=True, slots=True)
class BuildTarget:
    platform: Platform
    output_dir: Path


@dataclass(frozen=True, slots=True)
class BuildResult:
    target: BuildTarget
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def platform(self) -> Platform:
        return self.target.platform


@dataclass(frozen=True, slots=True)
class BundleManifest:
    """Top-level description of a packaged engine release."""

    name: str
    version: str
    type: str = "engine"

    @classmethod
    def for_release(cls, *, product: str, version: str) -> BundleManifest:
        return cls(name=f"{product} Engine Core ({version})", version=version)

    def to_json(self) -> str:
        payload = {"type": self.type, "name": self.name, "version": self.version}
        return json.dumps(payload, indent=2) + "\n"


@dataclass(frozen=True, slots=True)
class StagingTree:
    """On-disk layout that is zipped into the release archive.

    root/
      bundle/<platform>/...
      bundle-info.json
    """

    root: Path

    @property
    def bundle_dir(self) -> Path:
        return self.root / BUNDLE_DIR_NAME

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME

    def platform_dir(self, platform: Platform) -> Path:
        return self.bundle_dir / platform.value


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Resolved command-line options for one release run."""

    project_root: Path
    output_dir: Path
    platform: PlatformSelection = "all"
    bump: str = "prepatch"
    identifier: str = "alpha"
    is_dev: bool = False
    upload: bool = False
