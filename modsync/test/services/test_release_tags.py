from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path

from modsync.core.result import Err, Ok, Result
from modsync.git.repository import Repository
from modsync.output.console import MockConsole
from modsync.output.prompts import ScriptedPrompter
from modsync.platform.process import ProcessError
from modsync.platform.runner import ShellRunner
from modsync.services.release.model import OVERRIDDEN_COMMIT, LastTag, TargetVersion, Version
from modsync.services.release.tags import (
    candidate_tags,
    parse_override,
    resolve_last_tag,
    tag_pattern,
)

ALL_TAGS = ["v2.0.0", "v1.1.1", "v1.1.0", "v1.0.0"]


class TagExecutor:
    """Answers ``git tag --list`` with fnmatch-filtered tags, like git does."""

    def __init__(self, tags: list[str], commits: dict[str, str] | None = None) -> None:
        self.tags = tags
        self.commits = commits or {}
        self.calls: list[tuple[str, ...]] = []

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        self.calls.append(tuple(cmd))
        if cmd[:3] == ["git", "tag", "--list"]:
            pattern = cmd[-1]
            return Ok("\n".join(t for t in self.tags if fnmatchcase(t, pattern)) + "\n")
        if cmd[:3] == ["git", "rev-list", "-1"]:
            tag = cmd[3]
            if tag in self.commits:
                return Ok(self.commits[tag] + "\n")
            return Err(ProcessError(tuple(cmd), 128, "", f"fatal: ambiguous argument '{tag}'"))
        raise AssertionError(f"unexpected command: {cmd}")


def _repo(tmp_path: Path, executor: TagExecutor) -> Repository:
    return Repository(tmp_path, ShellRunner(console=MockConsole(), dry_run=False, executor=executor))


def test_tag_patterns() -> None:
    assert tag_pattern("major", TargetVersion(3)) == "v*"
    assert tag_pattern("minor", TargetVersion(1, 2)) == "v1.*"
    assert tag_pattern("bugfix", TargetVersion(1, 2, 4)) == "v1.2.*"
    assert tag_pattern("security", TargetVersion(1, 2, 4)) == "v1.2.*"


def test_candidate_tags_strip_prefix_and_limit() -> None:
    tags = [f"v1.0.{n}" for n in range(15, 0, -1)]
    out = candidate_tags(tags, limit=10)
    assert len(out) == 10
    assert out[0] == "1.0.15"
    assert candidate_tags(["", " v1.0.0 "]) == ["1.0.0"]


def test_minor_filter_yields_same_major_line(tmp_path: Path) -> None:
    executor = TagExecutor(ALL_TAGS, commits={"v1.1.1": "c111"})
    result = resolve_last_tag(
        repo=_repo(tmp_path, executor),
        release_type="minor",
        target=TargetVersion(1, 2),
        override=None,
        console=MockConsole(),
        prompter=ScriptedPrompter(),
    )

    assert result == Ok(LastTag(Version(1, 1, 1), "c111"))
    assert executor.calls[0] == ("git", "tag", "--list", "--sort=-version:refname", "v1.*")
    assert executor.calls[1] == ("git", "rev-list", "-1", "v1.1.1")
    listed = candidate_tags([t for t in ALL_TAGS if t.startswith("v1.")])
    assert listed == ["1.1.1", "1.1.0", "1.0.0"]


def test_override_skips_git(tmp_path: Path) -> None:
    executor = TagExecutor(ALL_TAGS)
    result = resolve_last_tag(
        repo=_repo(tmp_path, executor),
        release_type="bugfix",
        target=TargetVersion(1, 1, 2),
        override="1.1.1",
        console=MockConsole(),
        prompter=ScriptedPrompter(),
    )

    assert result == Ok(LastTag(Version(1, 1, 1), OVERRIDDEN_COMMIT))
    assert isinstance(result, Ok) and result.value.overridden
    assert executor.calls == []


def test_invalid_override() -> None:
    result = parse_override("v1.1")
    assert isinstance(result, Err)
    assert result.error.kind == "validation"
    assert result.error.message == "invalid last tag: 'v1.1' (expected x.y.z)"


def test_no_matching_tags(tmp_path: Path) -> None:
    result = resolve_last_tag(
        repo=_repo(tmp_path, TagExecutor(ALL_TAGS)),
        release_type="bugfix",
        target=TargetVersion(7, 0, 1),
        override=None,
        console=MockConsole(),
        prompter=ScriptedPrompter(),
    )
    assert isinstance(result, Err)
    assert result.error.kind == "resolution"
    assert result.error.message == "no tags match 'v7.0.*'"
    assert result.error.hint is not None and "--last-tag" in result.error.hint


def test_malformed_top_tag_prompts_interactively(tmp_path: Path) -> None:
    executor = TagExecutor(["v1.2.0-rc.1", "v1.1.0", "v1.0.0"], commits={"v1.1.0": "c110"})
    console = MockConsole()
    prompter = ScriptedPrompter(choices=["1.1.0"])

    result = resolve_last_tag(
        repo=_repo(tmp_path, executor),
        release_type="minor",
        target=TargetVersion(1, 2),
        override=None,
        console=console,
        prompter=prompter,
    )

    assert result == Ok(LastTag(Version(1, 1, 0), "c110"))
    assert prompter.asked == ["Select the last tag before the new version:"]
    assert "error: last tag (1.2.0-rc.1) does not match the expected pattern (x.y.z)" in console.messages


def test_malformed_choice_asks_again(tmp_path: Path) -> None:
    executor = TagExecutor(["v1.2.0-rc.1", "v1.1.0"], commits={"v1.1.0": "c110"})
    prompter = ScriptedPrompter(choices=["1.2.0-rc.1", "1.1.0"])

    result = resolve_last_tag(
        repo=_repo(tmp_path, executor),
        release_type="minor",
        target=TargetVersion(1, 2),
        override=None,
        console=MockConsole(),
        prompter=prompter,
    )

    assert isinstance(result, Ok)
    assert len(prompter.asked) == 2


def test_malformed_top_tag_without_terminal_fails(tmp_path: Path) -> None:
    result = resolve_last_tag(
        repo=_repo(tmp_path, TagExecutor(["v1.2.0-rc.1", "v1.1.0"])),
        release_type="minor",
        target=TargetVersion(1, 2),
        override=None,
        console=MockConsole(),
        prompter=ScriptedPrompter(is_interactive=False),
    )
    assert isinstance(result, Err)
    assert result.error.kind == "resolution"


def test_unresolvable_commit(tmp_path: Path) -> None:
    result = resolve_last_tag(
        repo=_repo(tmp_path, TagExecutor(["v1.1.0"])),
        release_type="minor",
        target=TargetVersion(1, 2),
        override=None,
        console=MockConsole(),
        prompter=ScriptedPrompter(),
    )
    assert isinstance(result, Err)
    assert result.error.message == "failed to resolve commit of v1.1.0"
