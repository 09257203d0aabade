from __future__ import annotations

from pathlib import Path

import typer

from modsync.cli.commands._helpers import load_modules
from modsync.cli.context import build_context
from modsync.core.errors import ErrorCode
from modsync.platform.runner import ShellRunner
from modsync.services.normalize import normalize_manifests


def normalize(
    modules: list[str] | None = typer.Argument(
        None, help="Modules to normalize (default: all)"
    ),
    no_main_manifest: bool = typer.Option(
        False, "--no-main-manifest", help="Leave the root composer.json alone"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Report what would change without writing"
    ),
    diff: bool = typer.Option(False, "--diff", help="Show the normalization diff"),
    force: bool = typer.Option(False, "--force", help="Continue after a failure"),
    modules_dir: Path | None = typer.Option(
        None, "--modules-dir", "-m", help="Modules directory, relative to the root"
    ),
) -> None:
    """Normalize composer.json files with composer normalize."""
    ctx = build_context()
    selected = load_modules(ctx, modules_dir, modules or [])

    report = normalize_manifests(
        root=ctx.root,
        modules=selected,
        include_root=not no_main_manifest,
        dry_run=dry_run,
        diff=diff,
        force=force,
        runner=ShellRunner(console=ctx.console, dry_run=False),
        console=ctx.console,
    )
    if not report.ok:
        raise typer.Exit(code=int(ErrorCode.SYNC_ERROR if dry_run else ErrorCode.IO_ERROR))
    ctx.console.success(f"{len(report.normalized)} manifest(s) normalized")
