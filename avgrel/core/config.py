"""Typed configuration loading.

The release tool reads an optional ``avgrel.toml`` at the project root. Every
key has a default matching the AVGPlus project layout, so a missing file is
not an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "BuildConfig",
    "UrlsConfig",
    "RemoteConfig",
    "ReleaseConfig",
    "ConfigError",
    "CONFIG_FILE_NAME",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "avgrel.toml"

DEFAULT_PRODUCT = "AVGPlus"
DEFAULT_VERSION_FILE = "package.json"
DEFAULT_STAGING_DIR = "package-release/.temp"
DEFAULT_RELEASE_DIR = "package-release"

DEFAULT_BUILD_COMMAND = "yarn build:{platform}"
DEFAULT_BUILD_OUTPUT_DIR = "dist/{platform}"

DEFAULT_ENGINE_URL = "https://live-player.avg-engine.com/engine"
DEFAULT_ASSETS_URL = "https://game-project.avg-engine.com/docs-project"

DEFAULT_REMOTE_PORT = 22
DEFAULT_REMOTE_ROOT = "/data/avg-plus/live-players"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """How one platform build is started and where it writes its output.

    ``command`` and ``output_dir`` are templates; every ``{platform}`` is
    replaced with the platform id and any other braces are kept as written.
    """

    command: str = DEFAULT_BUILD_COMMAND
    output_dir: str = DEFAULT_BUILD_OUTPUT_DIR
    timeout_seconds: float | None = None

    def command_for(self, platform: str) -> str:
        return self.command.replace("{platform}", platform)

    def output_dir_for(self, project_root: Path, platform: str) -> Path:
        return (project_root / self.output_dir.replace("{platform}", platform)).resolve()


@dataclass(frozen=True, slots=True)
class UrlsConfig:
    """Base URLs written into every platform's engine.json."""

    engine: str = DEFAULT_ENGINE_URL
    assets: str = DEFAULT_ASSETS_URL


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    """SFTP deployment target."""

    host: str | None = None
    port: int = DEFAULT_REMOTE_PORT
    username: str | None = None
    private_key: str | None = None
    root: str = DEFAULT_REMOTE_ROOT

    @property
    def is_configured(self) -> bool:
        return self.host is not None

    def private_key_path(self) -> Path | None:
        if self.private_key is None:
            return None
        return Path(self.private_key).expanduser()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    product: str = DEFAULT_PRODUCT
    version_file: str = DEFAULT_VERSION_FILE
    staging_dir: str = DEFAULT_STAGING_DIR
    build: BuildConfig = field(default_factory=BuildConfig)
    urls: UrlsConfig = field(default_factory=UrlsConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a config from a parsed TOML mapping."""
        build: StrDict = get_table(data, "build") or {}
        urls: StrDict = get_table(data, "urls") or {}
        remote: StrDict = get_table(data, "remote") or {}

        timeout = build.get("timeout_seconds")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            timeout = None
        elif timeout <= 0:
            timeout = None

        return cls(
            product=get_str(data, "product") or DEFAULT_PRODUCT,
            version_file=get_str(data, "version_file") or DEFAULT_VERSION_FILE,
            staging_dir=get_str(data, "staging_dir") or DEFAULT_STAGING_DIR,
            build=BuildConfig(
                command=get_str(build, "command") or DEFAULT_BUILD_COMMAND,
                output_dir=get_str(build, "output_dir") or DEFAULT_BUILD_OUTPUT_DIR,
                timeout_seconds=float(timeout) if timeout is not None else None,
            ),
            urls=UrlsConfig(
                engine=(get_str(urls, "engine") or DEFAULT_ENGINE_URL).rstrip("/"),
                assets=(get_str(urls, "assets") or DEFAULT_ASSETS_URL).rstrip("/"),
            ),
            remote=RemoteConfig(
                host=get_str(remote, "host"),
                port=get_int(remote, "port") or DEFAULT_REMOTE_PORT,
                username=get_str(remote, "username"),
                private_key=get_str(remote, "private_key"),
                root=(get_str(remote, "root") or DEFAULT_REMOTE_ROOT).rstrip("/"),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Like load_config, but a missing file yields the default config."""
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
