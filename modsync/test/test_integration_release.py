"""Integration test: a bugfix release against real git repositories.

Remotes are bare repositories under tmp_path; only ``gh`` is faked.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path

import pytest

from modsync.core.module import Module
from modsync.core.result import Ok, Result
from modsync.output.console import MockConsole
from modsync.output.prompts import ScriptedPrompter
from modsync.platform.process import ProcessError
from modsync.platform.process import run as run_process
from modsync.platform.runner import ShellRunner
from modsync.services.release.orchestrator import ReleaseOrchestrator
from modsync.services.release.workspace import WORKSPACE_DIR_NAME

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return proc.stdout.strip()


def _seed_remote(tmp_path: Path, name: str) -> Path:
    """Bare remote with main, 1.x and 1.2.x; v1.2.3 plus one fix on 1.2.x."""
    seed = tmp_path / "seed" / name
    seed.mkdir(parents=True)
    _git(seed, "init", "-q", "-b", "main")
    (seed / "composer.json").write_text(json.dumps({"name": f"acme/{name}"}), encoding="utf-8")
    _git(seed, "add", ".")
    _git(seed, "commit", "-q", "-m", "initial")
    _git(seed, "branch", "1.x")
    _git(seed, "checkout", "-q", "-b", "1.2.x")
    _git(seed, "tag", "v1.2.3")
    (seed / "CHANGELOG.md").write_text("fix\n", encoding="utf-8")
    _git(seed, "add", ".")
    _git(seed, "commit", "-q", "-m", "fix")
    _git(seed, "checkout", "-q", "main")

    remote = tmp_path / "remotes" / name
    remote.parent.mkdir(parents=True, exist_ok=True)
    _git(tmp_path, "clone", "-q", "--bare", str(seed), str(remote))
    return remote


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Release Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "release@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Release Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "release@example.com")


@pytest.mark.usefixtures("git_env")
def test_bugfix_release_end_to_end(tmp_path: Path) -> None:
    remotes = {name: _seed_remote(tmp_path, name) for name in ("framework", "http")}
    local = tmp_path / "work" / "framework"
    _git(tmp_path, "clone", "-q", str(remotes["framework"]), str(local))
    _git(local, "checkout", "-q", "1.2.x")

    gh_calls: list[tuple[list[str], Path]] = []

    def executor(
        cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        if cmd[0] == "gh":
            gh_calls.append((cmd, cwd))
            return Ok("https://github.com/acme/framework/releases/tag/v1.2.4\n")
        return run_process(cmd, cwd=cwd, timeout=timeout)

    console = MockConsole()
    runner = ShellRunner(console=console, dry_run=False, executor=executor)
    orchestrator = ReleaseOrchestrator(
        root=local,
        runner=runner,
        console=console,
        prompter=ScriptedPrompter(confirms=[True], texts=["Bugfixes%n- header casing"]),
        temp_root=tmp_path / "tmp",
    )

    prepared = orchestrator.prepare(
        release_type="bugfix",
        version="1.2.4",
        monorepo_name="framework",
        repository_base=f"{tmp_path / 'remotes'}/",
        major_branch="main",
    )
    assert isinstance(prepared, Ok), console.text
    assert prepared.value.last_tag is not None
    assert str(prepared.value.last_tag.version) == "1.2.3"

    http = Module("http", local / "modules" / "http" / "composer.json")
    result = orchestrator.execute(prepared.value, [http])

    assert isinstance(result, Ok), console.text
    assert result.value.ok, console.text

    for remote in remotes.values():
        assert "v1.2.4" in _git(remote, "tag", "--list").splitlines()
        fix = _git(remote, "rev-parse", "1.2.x")
        assert _git(remote, "rev-parse", "v1.2.4^{commit}") == fix
        assert _git(remote, "rev-parse", "1.x") == fix
        assert _git(remote, "rev-parse", "main") == fix

    assert len(gh_calls) == 1
    cmd, cwd = gh_calls[0]
    assert cmd[3] == "v1.2.4"
    assert cmd[cmd.index("--target") + 1] == "1.2.x"
    assert cwd.name == "framework"

    assert _git(local, "rev-parse", "--abbrev-ref", "HEAD") == "1.2.x"
    assert "v1.2.4" in _git(local, "tag", "--list").splitlines()
    assert list((tmp_path / "tmp" / WORKSPACE_DIR_NAME).iterdir()) == []


@pytest.mark.usefixtures("git_env")
def test_dirty_tree_is_rejected(tmp_path: Path) -> None:
    remote = _seed_remote(tmp_path, "framework")
    local = tmp_path / "work" / "framework"
    _git(tmp_path, "clone", "-q", str(remote), str(local))
    _git(local, "checkout", "-q", "1.2.x")
    (local / "untracked.txt").write_text("x", encoding="utf-8")

    console = MockConsole()
    runner = ShellRunner(console=console, dry_run=False)
    orchestrator = ReleaseOrchestrator(
        root=local, runner=runner, console=console, prompter=ScriptedPrompter()
    )

    prepared = orchestrator.prepare(
        release_type="bugfix",
        version="1.2.4",
        monorepo_name="framework",
        repository_base=f"{tmp_path / 'remotes'}/",
        major_branch="main",
    )

    assert not isinstance(prepared, Ok)
    assert prepared.error.message == "there are uncommitted changes"
    assert runner.executed == []
