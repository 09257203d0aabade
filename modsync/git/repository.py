"""Git repository handle.

A ``Repository`` carries its own working directory, so operations on many
cloned modules never depend on the process working directory. Commands go
through a ``ShellRunner``: reads always run, writes are simulated in dry-run
mode.

Usage:
    repo = Repository(Path("/path/to/repo"), runner)

    match repo.current_branch():
        case Ok(branch):
            print(f"Branch: {branch}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from modsync.core.result import Err, Ok, Result
from modsync.platform.process import ProcessError
from modsync.platform.runner import ShellRunner
from modsync.platform.timeouts import GIT_NETWORK_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS

__all__ = [
    "GitError",
    "Repository",
    "StatusEntry",
    "git_timeout",
]

_NETWORK_COMMANDS = frozenset({"clone", "fetch", "pull", "push"})


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The full command that failed.
        message: Error message (stderr, or a summary).
        returncode: Process return code.
        timed_out: True when git did not finish within its timeout.
    """

    command: tuple[str, ...]
    message: str
    returncode: int = 1
    timed_out: bool = False

    @classmethod
    def from_process(cls, error: ProcessError) -> GitError:
        return cls(
            command=error.command,
            message=error.detail,
            returncode=error.returncode,
            timed_out=error.timed_out,
        )


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry of ``git status --porcelain``.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


def git_timeout(args: Sequence[str]) -> float:
    """Timeout for a git subcommand; network commands get more time."""
    command = args[0] if args else ""
    return GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else GIT_TIMEOUT_SECONDS


def _parse_status_line(line: str) -> StatusEntry | None:
    if len(line) < 4:
        return None
    return StatusEntry(xy=line[:2], path=line[3:])


class Repository:
    """A git working copy.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, runner: ShellRunner) -> None:
        self.path = path
        self._runner = runner

    @classmethod
    def clone(cls, url: str, dest: Path, runner: ShellRunner) -> Result[Repository, GitError]:
        """Clone ``url`` into ``dest``.

        In dry-run mode nothing is cloned; ``dest`` is created empty so the
        simulated steps have a working directory.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        args = ["clone", url, dest.name]
        result = runner.execute(["git", *args], cwd=dest.parent, timeout=git_timeout(args))
        if isinstance(result, Err):
            return Err(GitError.from_process(result.error))
        if runner.dry_run:
            dest.mkdir(parents=True, exist_ok=True)
        return Ok(cls(dest, runner))

    # Reads

    def current_branch(self) -> Result[str, GitError]:
        """Name of the checked-out branch (``HEAD`` when detached)."""
        return self._query(["rev-parse", "--abbrev-ref", "HEAD"])

    def rev_parse(self, ref: str) -> Result[str, GitError]:
        return self._query(["rev-parse", ref])

    def status_entries(self) -> Result[list[StatusEntry], GitError]:
        """Uncommitted changes, untracked files included."""
        result = self._runner.query_lines(["git", "status", "--porcelain"], cwd=self.path)
        if isinstance(result, Err):
            return Err(GitError.from_process(result.error))
        entries = [e for e in (_parse_status_line(ln) for ln in result.value) if e is not None]
        return Ok(entries)

    def list_tags(self, pattern: str) -> Result[list[str], GitError]:
        """Tags matching a glob, highest version first."""
        result = self._runner.query_lines(
            ["git", "tag", "--list", "--sort=-version:refname", pattern], cwd=self.path
        )
        if isinstance(result, Err):
            return Err(GitError.from_process(result.error))
        return Ok(result.value)

    def tag_commit(self, tag: str) -> Result[str, GitError]:
        """Commit a tag points to."""
        return self._query(["rev-list", "-1", tag])

    # Writes

    def git(self, args: Sequence[str], *, default: str = "") -> Result[str, GitError]:
        """Run a state-changing git subcommand (simulated in dry-run mode)."""
        result = self._runner.execute(
            ["git", *args], cwd=self.path, timeout=git_timeout(args), default=default
        )
        if isinstance(result, Err):
            return Err(GitError.from_process(result.error))
        return Ok(result.value)

    def fetch(self, remote: str = "origin") -> Result[str, GitError]:
        return self.git(["fetch", "--tags", remote])

    def checkout(self, branch: str) -> Result[str, GitError]:
        return self.git(["checkout", branch])

    def _query(self, args: list[str]) -> Result[str, GitError]:
        result = self._runner.query(["git", *args], cwd=self.path, timeout=git_timeout(args))
        if isinstance(result, Err):
            return Err(GitError.from_process(result.error))
        return Ok(result.value)
