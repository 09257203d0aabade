from __future__ import annotations

from pathlib import Path

import pytest
import typer

from modsync.cli.commands._helpers import release_error_code
from modsync.cli.context import CLIContext
from modsync.core.config import ModuleSyncConfig, ProjectConfig
from modsync.core.errors import ErrorCode
from modsync.core.module import Module
from modsync.core.result import Err, Ok, Result
from modsync.output.console import MockConsole
from modsync.output.prompts import ScriptedPrompter
from modsync.services.release.errors import ReleaseError, StepFailure
from modsync.services.release.model import ReleaseContext, TargetVersion
from modsync.services.release.orchestrator import (
    CancellationToken,
    ModuleOutcome,
    ReleaseSummary,
)


def _ctx(tmp_path: Path) -> CLIContext:
    (tmp_path / "modules" / "http").mkdir(parents=True)
    (tmp_path / "modules" / "http" / "composer.json").write_text("{}", encoding="utf-8")
    return CLIContext(
        root=tmp_path,
        config=ProjectConfig(module_sync=ModuleSyncConfig(repository_base="git@github.com:acme/")),
        console=MockConsole(),
        prompter=ScriptedPrompter(),
    )


def _release_ctx() -> ReleaseContext:
    return ReleaseContext(
        release_type="bugfix",
        target=TargetVersion(1, 2, 4),
        dry_run=False,
        monorepo_name="framework",
        repository_base="git@github.com:acme/",
    )


def _patch(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    *,
    prepared: Result[ReleaseContext, ReleaseError],
    executed: Result[ReleaseSummary, ReleaseError] | None = None,
) -> tuple[CLIContext, list[list[Module]]]:
    import modsync.cli.commands.release_cmd as release_cmd

    ctx = _ctx(tmp_path)
    seen: list[list[Module]] = []

    class FakeOrchestrator:
        def __init__(self, **_: object) -> None:
            pass

        def prepare(self, **_: object) -> Result[ReleaseContext, ReleaseError]:
            return prepared

        def execute(self, ctx: ReleaseContext, modules: list[Module]):
            seen.append(list(modules))
            assert executed is not None
            return executed

    monkeypatch.setattr(release_cmd, "build_context", lambda: ctx)
    monkeypatch.setattr(release_cmd, "ReleaseOrchestrator", FakeOrchestrator)
    return ctx, seen


def _invoke(**overrides: object) -> None:
    import modsync.cli.commands.release_cmd as release_cmd

    options: dict[str, object] = {
        "release_type": "bugfix",
        "version": "1.2.4",
        "dry_run": False,
        "last_tag": None,
        "skip_upmerge": False,
        "monorepo_name": "framework",
        "modules_dir": None,
        "keep_going": False,
    }
    options.update(overrides)
    release_cmd.release(**options)  # type: ignore[arg-type]


def test_error_kinds_map_to_exit_codes() -> None:
    assert release_error_code("validation") == ErrorCode.USER_ERROR
    assert release_error_code("aborted") == ErrorCode.USER_ERROR
    assert release_error_code("precondition") == ErrorCode.ENV_ERROR
    assert release_error_code("resolution") == ErrorCode.ENV_ERROR
    assert release_error_code("config") == ErrorCode.ENV_ERROR
    assert release_error_code("io") == ErrorCode.IO_ERROR


def test_precondition_failure_exits_with_env_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    error = ReleaseError(kind="precondition", message="there are uncommitted changes", hint="commit")
    ctx, seen = _patch(monkeypatch, tmp_path, prepared=Err(error))

    with pytest.raises(typer.Exit) as exc:
        _invoke()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert "error: there are uncommitted changes" in ctx.console.messages
    assert "hint: commit" in ctx.console.messages
    assert seen == []


def test_successful_release(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    http = Module("http", tmp_path / "modules" / "http" / "composer.json")
    summary = ReleaseSummary(
        tag="v1.2.4",
        dry_run=False,
        outcomes=(ModuleOutcome(Module("framework", tmp_path / "composer.json")), ModuleOutcome(http)),
        published=True,
        release_url="https://github.com/acme/framework/releases/tag/v1.2.4",
    )
    ctx, seen = _patch(monkeypatch, tmp_path, prepared=Ok(_release_ctx()), executed=Ok(summary))

    _invoke()

    assert [[m.name for m in mods] for mods in seen] == [["http"]]
    assert isinstance(ctx.console, MockConsole)
    header = ctx.console.messages.index("Summary v1.2.4")
    assert ctx.console.messages[header - 1] == ""
    assert "OK release v1.2.4 published" in ctx.console.messages


def test_failed_module_exits_with_release_failed(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    http = Module("http", tmp_path / "modules" / "http" / "composer.json")
    failure = StepFailure(
        module="http",
        step="push",
        command=("git", "push", "--all", "origin"),
        reason="failed",
        detail="rejected",
    )
    summary = ReleaseSummary(
        tag="v1.2.4",
        dry_run=False,
        outcomes=(ModuleOutcome(http, failure),),
    )
    ctx, _ = _patch(monkeypatch, tmp_path, prepared=Ok(_release_ctx()), executed=Ok(summary))

    with pytest.raises(typer.Exit) as exc:
        _invoke()

    assert exc.value.exit_code == int(ErrorCode.RELEASE_FAILED)
    assert isinstance(ctx.console, MockConsole)
    assert "http: push failed: git push --all origin" in ctx.console.messages
    assert "warning: release not published: some modules did not complete" in ctx.console.messages


def test_declined_exits_with_user_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _patch(
        monkeypatch,
        tmp_path,
        prepared=Ok(_release_ctx()),
        executed=Err(ReleaseError(kind="aborted", message="aborted by operator")),
    )

    with pytest.raises(typer.Exit) as exc:
        _invoke()

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_interrupt_handler_cancels_then_aborts() -> None:
    import signal

    from modsync.cli.commands.release_cmd import cancel_on_interrupt

    token = CancellationToken()
    console = MockConsole()
    before = signal.getsignal(signal.SIGINT)

    with cancel_on_interrupt(token, console):
        handler = signal.getsignal(signal.SIGINT)
        assert callable(handler)
        handler(signal.SIGINT, None)
        assert token.cancelled
        with pytest.raises(KeyboardInterrupt):
            handler(signal.SIGINT, None)

    assert signal.getsignal(signal.SIGINT) is before
    assert console.has_warning()
