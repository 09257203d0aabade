"""Resolution of the tag a release builds on."""

from __future__ import annotations

from collections.abc import Sequence

from modsync.core.result import Err, Ok, Result
from modsync.git.repository import Repository
from modsync.output.console import ConsoleProtocol
from modsync.output.prompts import PrompterProtocol
from modsync.services.release.errors import ReleaseError
from modsync.services.release.model import (
    OVERRIDDEN_COMMIT,
    LastTag,
    ReleaseType,
    TargetVersion,
)
from modsync.services.release.versioning import parse_version

TAG_CANDIDATE_LIMIT = 10


def tag_pattern(release_type: ReleaseType, target: TargetVersion) -> str:
    """Glob of the tags a release of this type may follow.

    A major release may follow any tag; a minor release one of the same major
    line; a bugfix/security release one of the same minor line.
    """
    if release_type == "major":
        return "v*"
    if release_type == "minor":
        return f"v{target.major}.*"
    return f"v{target.major}.{target.minor}.*"


def candidate_tags(tags: Sequence[str], *, limit: int = TAG_CANDIDATE_LIMIT) -> list[str]:
    """Top ``limit`` tags, in the given order, without their ``v`` prefix."""
    out: list[str] = []
    for tag in tags:
        name = tag.strip()
        if not name:
            continue
        out.append(name.removeprefix("v"))
        if len(out) == limit:
            break
    return out


def parse_override(text: str) -> Result[LastTag, ReleaseError]:
    version = parse_version(text)
    if version is None:
        return Err(
            ReleaseError(
                kind="validation",
                message=f"invalid last tag: '{text}' (expected x.y.z)",
            )
        )
    return Ok(LastTag(version=version, commit=OVERRIDDEN_COMMIT))


def resolve_last_tag(
    *,
    repo: Repository,
    release_type: ReleaseType,
    target: TargetVersion,
    override: str | None,
    console: ConsoleProtocol,
    prompter: PrompterProtocol,
) -> Result[LastTag, ReleaseError]:
    """Find the last release tag for this release.

    The highest matching tag is used when it is a plain ``x.y.z`` version.
    Otherwise (pre-release or malformed tag on top) an interactive operator
    picks one of the candidates; without a terminal the resolution fails.
    """
    if override is not None:
        return parse_override(override)

    pattern = tag_pattern(release_type, target)
    listed = repo.list_tags(pattern)
    if isinstance(listed, Err):
        return Err(
            ReleaseError(
                kind="resolution",
                message="failed to list tags",
                hint=listed.error.message,
            )
        )

    candidates = candidate_tags(listed.value)
    if not candidates:
        return Err(
            ReleaseError(
                kind="resolution",
                message=f"no tags match '{pattern}'",
                hint="pass the previous release with --last-tag x.y.z",
            )
        )

    selected = candidates[0]
    version = parse_version(selected)
    while version is None:
        console.error(f"last tag ({selected}) does not match the expected pattern (x.y.z)")
        if not prompter.interactive:
            return Err(
                ReleaseError(
                    kind="resolution",
                    message="no valid last tag and input is not interactive",
                    hint="pass the previous release with --last-tag x.y.z",
                )
            )
        selected = prompter.choose(
            "Select the last tag before the new version:",
            candidates,
            default=candidates[0],
        )
        version = parse_version(selected)

    commit = repo.tag_commit(f"v{selected}")
    if isinstance(commit, Err):
        return Err(
            ReleaseError(
                kind="resolution",
                message=f"failed to resolve commit of v{selected}",
                hint=commit.error.message,
            )
        )

    return Ok(LastTag(version=version, commit=commit.value))
