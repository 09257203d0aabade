from __future__ import annotations

from pathlib import Path

import typer

from modsync.cli.commands._helpers import modules_path
from modsync.cli.context import build_context
from modsync.core.errors import ErrorCode
from modsync.output.console import Style
from modsync.services.check import check_sync, module_candidates


def check(
    modules_dir: Path | None = typer.Option(
        None, "--modules-dir", "-m", help="Modules directory, relative to the root"
    ),
) -> None:
    """Check that module requirements are in sync with the root package."""
    ctx = build_context()
    console = ctx.console

    directory = modules_path(ctx, modules_dir)
    if not directory.is_dir():
        console.error(f"modules directory does not exist: {directory}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    report = check_sync(ctx.config, module_candidates(directory))

    for skipped in report.skipped:
        console.print(f"skipping {skipped.name}: {skipped.reason}", Style.DIM)
    for mismatch in report.mismatches:
        console.error(mismatch.describe())
    for name in report.unused:
        console.warning(f"{name} is required by the root package but by no module")

    if not report.in_sync:
        console.print(
            f"{len(report.mismatches)} requirement(s) out of sync in {len(report.checked)} module(s)",
            Style.BOLD,
        )
        raise typer.Exit(code=int(ErrorCode.SYNC_ERROR))

    console.success(f"{len(report.checked)} module(s) in sync")
