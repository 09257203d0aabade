from __future__ import annotations

import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType

import typer

from modsync.cli.commands._helpers import exit_on_error, load_modules, release_error_code
from modsync.cli.context import CLIContext, build_context
from modsync.core.errors import ErrorCode
from modsync.core.result import Err
from modsync.output.console import ConsoleProtocol, Style, format_command
from modsync.platform.runner import ShellRunner
from modsync.services.release.orchestrator import (
    CancellationToken,
    ReleaseOrchestrator,
    ReleaseSummary,
)

DEFAULT_MONOREPO_NAME = "framework"


@contextmanager
def cancel_on_interrupt(token: CancellationToken, console: ConsoleProtocol) -> Iterator[None]:
    """First Ctrl+C cancels at the next module boundary, the second one aborts."""

    def handler(signum: int, frame: FrameType | None) -> None:
        if token.cancelled:
            raise KeyboardInterrupt
        token.cancel()
        console.warning("cancelling after the current module (Ctrl+C again to abort now)")

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def release(
    release_type: str = typer.Argument(
        ..., metavar="TYPE", help="major, minor, bugfix or security"
    ),
    version: str = typer.Argument(..., help="The new version (N, N.N or N.N.N)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-y", help="Print mutating commands only"),
    last_tag: str | None = typer.Option(
        None, "--last-tag", "-l", help="Override the last tag (x.y.z)"
    ),
    skip_upmerge: bool = typer.Option(
        False, "--skip-upmerge", "-u", help="Do not merge the release up into newer branches"
    ),
    monorepo_name: str = typer.Option(
        DEFAULT_MONOREPO_NAME, "--monorepo-name", "-r", help="Repository name of the monorepo"
    ),
    modules_dir: Path | None = typer.Option(
        None, "--modules-dir", "-m", help="Modules directory, relative to the root"
    ),
    keep_going: bool = typer.Option(
        False, "--keep-going", "-k", help="Continue with the next module after a failure"
    ),
) -> None:
    """Tag and publish a release of the monorepo and every module."""
    ctx = build_context()
    settings = ctx.config.module_sync
    modules = load_modules(ctx, modules_dir, [])

    if dry_run:
        ctx.console.warning("dry run: mutating commands are printed, not executed")

    runner = ShellRunner(console=ctx.console, dry_run=dry_run)
    token = CancellationToken()
    orchestrator = ReleaseOrchestrator(
        root=ctx.root,
        runner=runner,
        console=ctx.console,
        prompter=ctx.prompter,
        cancel_token=token,
    )

    prepared = orchestrator.prepare(
        release_type=release_type,
        version=version,
        monorepo_name=monorepo_name,
        repository_base=settings.repository_base,
        major_branch=settings.major_branch,
        last_tag=last_tag,
        skip_upmerge=skip_upmerge,
        keep_going=keep_going,
    )
    if isinstance(prepared, Err):
        exit_on_error(prepared, ctx, release_error_code(prepared.error.kind))
        return

    with cancel_on_interrupt(token, ctx.console):
        executed = orchestrator.execute(prepared.value, modules)
    if isinstance(executed, Err):
        exit_on_error(executed, ctx, release_error_code(executed.error.kind))
        return

    summary = executed.value
    _print_summary(ctx, summary)
    if not summary.ok:
        raise typer.Exit(code=int(ErrorCode.RELEASE_FAILED))


def _print_summary(ctx: CLIContext, summary: ReleaseSummary) -> None:
    console = ctx.console
    console.newline()
    console.header(f"Summary {summary.tag}" + (" (dry-run)" if summary.dry_run else ""))

    for outcome in summary.outcomes:
        if outcome.failure is None:
            console.print(f"{outcome.module.name}: ok", Style.SUCCESS)
            continue
        failure = outcome.failure
        console.print(failure.describe(), Style.ERROR)
        if failure.detail:
            console.print(f"  {failure.detail}", Style.DIM)

    for module in summary.skipped:
        console.print(f"{module.name}: skipped", Style.WARNING)

    if summary.publish_failure is not None:
        console.print(summary.publish_failure.describe(), Style.ERROR)
        if summary.publish_failure.detail:
            console.print(f"  {summary.publish_failure.detail}", Style.DIM)
        console.print(
            f"hint: retry with: {format_command(summary.publish_failure.command)}", Style.DIM
        )
    elif summary.published:
        console.success(f"release {summary.tag} published")
        if summary.release_url:
            console.print(summary.release_url, Style.DIM)
    elif summary.cancelled:
        console.warning("release cancelled; nothing was published")
    else:
        console.warning("release not published: some modules did not complete")
