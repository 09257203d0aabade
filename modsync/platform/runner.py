"""Command runner with a dry-run mode.

Commands fall in two groups:

- queries (``git status``, ``git rev-parse``, ``git tag --list``) never change
  anything and always run, also in dry-run mode;
- executions (clone, tag, branch, merge, push, ``gh release create``) change
  state. In dry-run mode they are echoed, paused for a short random interval
  and answered with a caller-supplied default instead of real output.

Both groups return ``Result[str, ProcessError]`` with surrounding whitespace
removed from stdout, so a failing command is always visible to the caller.
``query_lines`` keeps the leading whitespace of each line (porcelain status
columns).
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from pathlib import Path
from time import sleep
from typing import TYPE_CHECKING

from modsync.core.result import Err, Ok, Result
from modsync.platform.process import ProcessError
from modsync.platform.process import run as run_process
from modsync.platform.timeouts import DRY_RUN_DELAY_SECONDS, GIT_TIMEOUT_SECONDS

if TYPE_CHECKING:
    from modsync.output.console import ConsoleProtocol

__all__ = ["Executor", "ShellRunner"]

Executor = Callable[..., Result[str, ProcessError]]


class ShellRunner:
    """Runs commands for one modsync invocation.

    Attributes:
        dry_run: True when executions are simulated.
        executed: Every command passed to ``execute``, in order, whether it was
            run or simulated.
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        dry_run: bool,
        executor: Executor | None = None,
        delay_range: tuple[float, float] = DRY_RUN_DELAY_SECONDS,
        rng: random.Random | None = None,
    ) -> None:
        self._console = console
        self.dry_run = dry_run
        self._executor: Executor = executor or run_process
        self._delay_range = delay_range
        self._rng = rng or random.Random()
        self.executed: list[tuple[str, ...]] = []

    def query(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        timeout: float = GIT_TIMEOUT_SECONDS,
    ) -> Result[str, ProcessError]:
        """Run a read-only command, in every mode."""
        return _trimmed(self._run(cmd, cwd=cwd, timeout=timeout))

    def query_lines(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        timeout: float = GIT_TIMEOUT_SECONDS,
    ) -> Result[list[str], ProcessError]:
        """Run a read-only command and split its output into non-empty lines."""
        result = self._run(cmd, cwd=cwd, timeout=timeout)
        if isinstance(result, Err):
            return result
        return Ok([ln.rstrip() for ln in result.value.splitlines() if ln.strip()])

    def execute(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        timeout: float = GIT_TIMEOUT_SECONDS,
        default: str = "",
    ) -> Result[str, ProcessError]:
        """Run a state-changing command, or simulate it in dry-run mode.

        Args:
            cmd: Command and arguments.
            cwd: Working directory.
            timeout: Maximum seconds to wait.
            default: Output returned instead of running the command in dry-run
                mode (e.g. a placeholder commit hash).
        """
        self.executed.append(tuple(cmd))
        self._console.command(cmd, simulated=self.dry_run)
        if self.dry_run:
            low, high = self._delay_range
            sleep(self._rng.uniform(low, high))
            return Ok(default)
        return _trimmed(self._run(cmd, cwd=cwd, timeout=timeout))

    def _run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        timeout: float,
    ) -> Result[str, ProcessError]:
        return self._executor(list(cmd), cwd=cwd, timeout=timeout)


def _trimmed(result: Result[str, ProcessError]) -> Result[str, ProcessError]:
    if isinstance(result, Err):
        return result
    return Ok(result.value.strip())
