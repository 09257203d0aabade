from __future__ import annotations

from pathlib import Path

import typer

from modsync.cli.commands._helpers import exit_on_error, load_modules
from modsync.cli.context import build_context
from modsync.core.errors import ErrorCode
from modsync.platform.runner import ShellRunner
from modsync.services.require import add_requirement


def require(
    requirement: str = typer.Argument(..., help="Package to require"),
    version: str = typer.Argument("*", help="Version constraint"),
    modules: list[str] | None = typer.Argument(
        None, help="Modules to add the requirement to (default: all)"
    ),
    no_main_manifest: bool = typer.Option(
        False, "--no-main-manifest", "-u", help="Leave the root composer.json alone"
    ),
    modules_dir: Path | None = typer.Option(
        None, "--modules-dir", "-m", help="Modules directory, relative to the root"
    ),
) -> None:
    """Add a requirement to the root package and to modules."""
    ctx = build_context()
    selected = load_modules(ctx, modules_dir, modules or [])

    result = add_requirement(
        root=ctx.root,
        modules=selected,
        requirement=requirement,
        version=version,
        include_root=not no_main_manifest,
        runner=ShellRunner(console=ctx.console, dry_run=False),
        console=ctx.console,
    )
    exit_on_error(result, ctx, ErrorCode.IO_ERROR)
