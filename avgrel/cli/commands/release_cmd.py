from __future__ import annotations

from pathlib import Path
from typing import cast

import typer

from avgrel.cli.context import build_context
from avgrel.core.config import DEFAULT_RELEASE_DIR
from avgrel.core.errors import ErrorCode
from avgrel.core.result import Err
from avgrel.output.console import Style
from avgrel.output.errors import print_release_error, release_error_exit_code
from avgrel.services.release import ReleasePipeline
from avgrel.services.release.model import (
    BUMP_KINDS,
    PLATFORM_SELECTIONS,
    PlatformSelection,
    ReleaseOptions,
)


def release(
    platform: str = typer.Option(
        "all", "--platform", "-p", help=f"Platforms to build: {'|'.join(PLATFORM_SELECTIONS)}"
    ),
    bump: str = typer.Option(
        "prepatch", "--version-bump", "-v", help=f"Version bump: {', '.join(BUMP_KINDS)}"
    ),
    identifier: str = typer.Option(
        "alpha", "--identifier", "-i", help="Pre-release identifier for pre* bumps"
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-directory",
        "-o",
        help=f"Archive output directory (default: <project>/{DEFAULT_RELEASE_DIR})",
    ),
    is_dev: bool = typer.Option(
        False, "--is-dev-package", "-D", help="Test package: do not bump the version"
    ),
    upload: bool = typer.Option(False, "--upload", "-U", help="Upload the browser bundle"),
    project: Path | None = typer.Option(None, "--project", help="Project root (default: cwd)"),
    config: Path | None = typer.Option(None, "--config", help="Config file (default: avgrel.toml)"),
) -> None:
    """Bump the version, build every platform and package the engine release."""
    ctx = build_context(project=project, config_path=config)
    console = ctx.console

    if platform not in PLATFORM_SELECTIONS:
        console.error(f"unknown platform: {platform}")
        console.print(f"Available: {', '.join(PLATFORM_SELECTIONS)}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if upload and not ctx.config.remote.is_configured:
        console.error("--upload requires [remote] host in the config file")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    out = (output_dir or (ctx.project_root / DEFAULT_RELEASE_DIR)).expanduser().resolve()
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.error(f"cannot create output directory {out}: {e}")
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    console.step(f"platform: {platform}")
    options = ReleaseOptions(
        project_root=ctx.project_root,
        output_dir=out,
        platform=cast(PlatformSelection, platform),
        bump=bump,
        identifier=identifier,
        is_dev=is_dev,
        upload=upload,
    )

    result = ReleasePipeline(options=options, config=ctx.config, console=console).run()
    if isinstance(result, Err):
        print_release_error(result.error, console)
        raise typer.Exit(code=release_error_exit_code(result.error))
