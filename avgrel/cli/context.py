from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from avgrel.core.config import CONFIG_FILE_NAME, ReleaseConfig, load_config, load_config_or_default
from avgrel.core.errors import ErrorCode
from avgrel.core.result import Err
from avgrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(*, project: Path | None, config_path: Path | None) -> CLIContext:
    """Resolve the project root and load its config.

    An explicit ``--config`` must exist; the default ``avgrel.toml`` is optional.
    """
    console = RichConsole()
    root = (project or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        console.error(f"project directory not found: {root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if config_path is not None:
        result = load_config(config_path.expanduser().resolve())
    else:
        result = load_config_or_default(root / CONFIG_FILE_NAME)

    if isinstance(result, Err):
        console.error(result.error.message)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    return CLIContext(project_root=root, config=result.value, console=console)
