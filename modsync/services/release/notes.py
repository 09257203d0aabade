from __future__ import annotations

from pathlib import Path

from modsync.core.result import Err, Ok, Result
from modsync.platform.files import atomic_write_text
from modsync.platform.runner import ShellRunner
from modsync.platform.timeouts import GH_TIMEOUT_SECONDS
from modsync.services.release.errors import ReleaseError, StepFailure

# Typed into the single-line notes prompt to get a line break.
NEWLINE_TOKEN = "%n"


def render_release_notes(raw: str) -> str:
    return raw.replace(NEWLINE_TOKEN, "\n")


def notes_path_for_tag(working_dir: Path, tag: str) -> Path:
    return working_dir / f"release-notes-{tag}.md"


def write_release_notes(*, working_dir: Path, tag: str, raw: str) -> Result[Path, ReleaseError]:
    path = notes_path_for_tag(working_dir, tag)
    try:
        atomic_write_text(path, render_release_notes(raw))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io",
                message=f"failed to write release notes: {e}",
                hint=str(path),
            )
        )
    return Ok(path)


def release_create_command(*, tag: str, target: str, notes_file: Path) -> list[str]:
    return [
        "gh",
        "release",
        "create",
        tag,
        "--generate-notes",
        "--title",
        tag,
        "--target",
        target,
        "--notes-file",
        str(notes_file),
    ]


def publish_release(
    *,
    runner: ShellRunner,
    repo_root: Path,
    module: str,
    tag: str,
    target: str,
    notes_file: Path,
) -> Result[str, StepFailure]:
    """Create the hosted release for ``tag`` from the monorepo clone.

    Returns:
        Ok(gh output, usually the release URL) or Err(StepFailure).
    """
    cmd = release_create_command(tag=tag, target=target, notes_file=notes_file)
    result = runner.execute(cmd, cwd=repo_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            StepFailure(
                module=module,
                step="release",
                command=tuple(cmd),
                reason="timed_out" if e.timed_out else "failed",
                detail=e.detail,
            )
        )
    return Ok(result.value)
