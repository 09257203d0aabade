"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer

from modsync.core.errors import ErrorCode
from modsync.core.module import Module, discover_modules, select_modules
from modsync.core.result import Err, Result
from modsync.output.console import Style
from modsync.services.release.errors import ReleaseErrorKind

if TYPE_CHECKING:
    from modsync.cli.context import CLIContext


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> None:
    """Exit with error if result is Err, otherwise return.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))


_RELEASE_ERROR_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "validation": ErrorCode.USER_ERROR,
    "aborted": ErrorCode.USER_ERROR,
    "precondition": ErrorCode.ENV_ERROR,
    "resolution": ErrorCode.ENV_ERROR,
    "config": ErrorCode.ENV_ERROR,
    "cleanup": ErrorCode.IO_ERROR,
    "io": ErrorCode.IO_ERROR,
}


def release_error_code(kind: ReleaseErrorKind) -> ErrorCode:
    return _RELEASE_ERROR_CODES[kind]


def modules_path(ctx: CLIContext, modules_dir: Path | None) -> Path:
    rel = modules_dir if modules_dir is not None else Path(ctx.config.module_sync.modules_dir)
    return ctx.root / rel


def load_modules(ctx: CLIContext, modules_dir: Path | None, names: list[str]) -> list[Module]:
    """Discover modules and apply a by-name selection; unknown names exit."""
    discovered = discover_modules(modules_path(ctx, modules_dir))
    if isinstance(discovered, Err):
        exit_on_error(discovered, ctx, ErrorCode.ENV_ERROR)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    known = {m.name for m in discovered.value}
    unknown = [n for n in names if n not in known]
    if unknown:
        ctx.console.error(f"unknown module(s): {', '.join(unknown)}")
        ctx.console.print(f"hint: available: {', '.join(sorted(known))}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return select_modules(discovered.value, names)
