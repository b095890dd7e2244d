"""Tests for avgrel.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from avgrel.core.config import (
    BuildConfig,
    ConfigError,
    ReleaseConfig,
    RemoteConfig,
    load_config,
    load_config_or_default,
)
from avgrel.core.result import Err, Ok


class TestDefaults:
    def test_release_config(self) -> None:
        config = ReleaseConfig()
        assert config.product == "AVGPlus"
        assert config.version_file == "package.json"
        assert config.urls.engine == "https://live-player.avg-engine.com/engine"
        assert config.remote.root == "/data/avg-plus/live-players"
        assert not config.remote.is_configured

    def test_build_templates(self, tmp_path: Path) -> None:
        build = BuildConfig()
        assert build.command_for("browser") == "yarn build:browser"
        assert build.output_dir_for(tmp_path, "desktop") == (tmp_path / "dist" / "desktop").resolve()
        assert build.timeout_seconds is None

    def test_build_templates_keep_literal_braces(self, tmp_path: Path) -> None:
        build = BuildConfig(
            command="node -e 'console.log({ok: 1}, \"{0}\")' {platform} --out={platform}",
            output_dir="dist/{name}/{platform}",
        )
        assert build.command_for("browser") == (
            "node -e 'console.log({ok: 1}, \"{0}\")' browser --out=browser"
        )
        assert build.output_dir_for(tmp_path, "desktop") == (
            tmp_path / "dist" / "{name}" / "desktop"
        ).resolve()

    def test_frozen(self) -> None:
        config = ReleaseConfig()
        with pytest.raises(AttributeError):
            config.product = "Other"  # type: ignore[misc]


class TestFromDict:
    def test_full(self) -> None:
        config = ReleaseConfig.from_dict(
            {
                "product": "Demo",
                "build": {"command": "npm run build:{platform}", "timeout_seconds": 600},
                "urls": {"engine": "https://cdn.example.com/engine/", "assets": "https://a.example.com"},
                "remote": {
                    "host": "deploy.example.com",
                    "port": 2222,
                    "username": "ci",
                    "private_key": "~/.ssh/id_ed25519",
                },
            }
        )
        assert config.product == "Demo"
        assert config.build.command_for("browser") == "npm run build:browser"
        assert config.build.timeout_seconds == 600.0
        assert config.urls.engine == "https://cdn.example.com/engine"
        assert config.remote.host == "deploy.example.com"
        assert config.remote.port == 2222
        assert config.remote.is_configured
        key = config.remote.private_key_path()
        assert key is not None and "~" not in str(key)

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        config = ReleaseConfig.from_dict(
            {
                "product": "  ",
                "build": {"timeout_seconds": 0},
                "remote": {"port": True, "host": 42},
            }
        )
        assert config.product == "AVGPlus"
        assert config.build.timeout_seconds is None
        assert config.remote == RemoteConfig()


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "avgrel.toml"
        path.write_text('product = "Demo"\n[remote]\nhost = "h"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.product == "Demo"
        assert result.value.remote.host == "h"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "avgrel.toml"
        path.write_text("[remote\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_or_default_missing_file(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path / "avgrel.toml") == Ok(ReleaseConfig())

    def test_or_default_reports_broken_file(self, tmp_path: Path) -> None:
        path = tmp_path / "avgrel.toml"
        path.write_text("= nope", encoding="utf-8")
        assert isinstance(load_config_or_default(path), Err)
