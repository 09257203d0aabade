"""Release type, version and branch rules.

Everything here is a pure function over strings and integers; the
orchestrator feeds it the command line, the checked-out branch and the last
tag.
"""

from __future__ import annotations

import re

from modsync.core.result import Err, Ok, Result
from modsync.services.release.errors import ReleaseError
from modsync.services.release.model import (
    RELEASE_TYPES,
    BranchRef,
    ReleaseType,
    TargetVersion,
    Version,
    is_patch_class,
)

_NUM = r"(0|[1-9]\d*)"
_MAJOR_TARGET_RE = re.compile(rf"^{_NUM}$")
_MINOR_TARGET_RE = re.compile(rf"^{_NUM}\.{_NUM}$")
_PATCH_TARGET_RE = re.compile(rf"^{_NUM}\.{_NUM}\.{_NUM}$")
_MINOR_BRANCH_RE = re.compile(rf"^{_NUM}\.x$")
_PATCH_BRANCH_RE = re.compile(rf"^{_NUM}\.{_NUM}\.x$")


def _validation(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="validation", message=message, hint=hint))


def parse_release_type(token: str) -> Result[ReleaseType, ReleaseError]:
    value = token.strip().lower()
    for release_type in RELEASE_TYPES:
        if value == release_type:
            return Ok(release_type)
    return _validation(
        f"invalid release type: '{token}'",
        hint=f"allowed: {', '.join(RELEASE_TYPES)}",
    )


def parse_version(text: str) -> Version | None:
    """Parse a strict ``x.y.z`` version (no ``v`` prefix, no suffix)."""
    m = _PATCH_TARGET_RE.match(text.strip())
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def target_shape(release_type: ReleaseType) -> str:
    """Human-readable shape of the version argument for a release type."""
    if release_type == "major":
        return "N"
    if release_type == "minor":
        return "N.N"
    return "N.N.N"


def parse_target_version(
    release_type: ReleaseType, token: str
) -> Result[TargetVersion, ReleaseError]:
    text = token.strip()
    if release_type == "major":
        m = _MAJOR_TARGET_RE.match(text)
        if m is not None:
            return Ok(TargetVersion(int(m.group(1))))
    elif release_type == "minor":
        m = _MINOR_TARGET_RE.match(text)
        if m is not None:
            return Ok(TargetVersion(int(m.group(1)), int(m.group(2))))
    else:
        m = _PATCH_TARGET_RE.match(text)
        if m is not None:
            return Ok(TargetVersion(int(m.group(1)), int(m.group(2)), int(m.group(3))))

    return _validation(
        f"invalid version for a {release_type} release: '{token}' "
        f"(expected {target_shape(release_type)})"
    )


def branch_shape(release_type: ReleaseType, *, major_branch: str) -> str:
    if release_type == "major":
        return major_branch
    if release_type == "minor":
        return "{major}.x"
    return "{major}.{minor}.x"


def parse_branch(
    release_type: ReleaseType, branch: str, *, major_branch: str
) -> Result[BranchRef, ReleaseError]:
    """Check that the checked-out branch has the shape the release type needs."""
    if release_type == "major":
        if branch == major_branch:
            return Ok(BranchRef(name=branch))
    elif release_type == "minor":
        m = _MINOR_BRANCH_RE.match(branch)
        if m is not None:
            return Ok(BranchRef(name=branch, major=int(m.group(1))))
    else:
        m = _PATCH_BRANCH_RE.match(branch)
        if m is not None:
            return Ok(BranchRef(name=branch, major=int(m.group(1)), minor=int(m.group(2))))

    expected = branch_shape(release_type, major_branch=major_branch)
    return _validation(
        f"current branch '{branch}' does not match expected pattern '{expected}' "
        f"for a {release_type} release",
    )


def next_version(release_type: ReleaseType, last: Version) -> Version:
    """The only version a release of this type may publish after ``last``."""
    if release_type == "major":
        return Version(last.major + 1, 0, 0)
    if release_type == "minor":
        return Version(last.major, last.minor + 1, 0)
    return Version(last.major, last.minor, last.patch + 1)


def required_branch(release_type: ReleaseType, last: Version, *, major_branch: str) -> str:
    """The branch a release of this type must be started from after ``last``."""
    if release_type == "major":
        return major_branch
    if release_type == "minor":
        return last.minor_branch
    return last.patch_branch


def check_branch(
    release_type: ReleaseType,
    branch: BranchRef,
    last: Version,
    *,
    major_branch: str,
) -> Result[None, ReleaseError]:
    required = required_branch(release_type, last, major_branch=major_branch)
    if branch.name == required:
        return Ok(None)

    hint = f"check out '{required}' or pass --last-tag"
    if branch.major is not None and branch.major != last.major:
        return _validation(
            f"branch major version ({branch.major}) does not match the last tag's "
            f"major version ({last.major}); expected branch '{required}'",
            hint=hint,
        )
    if branch.minor is not None and branch.minor != last.minor:
        return _validation(
            f"branch minor version ({branch.minor}) does not match the last tag's "
            f"minor version ({last.minor}); expected branch '{required}'",
            hint=hint,
        )
    return _validation(
        f"branch '{branch.name}' does not match required branch '{required}' "
        f"for last tag v{last}",
        hint=hint,
    )


def check_transition(
    release_type: ReleaseType, last: Version, target: TargetVersion
) -> Result[Version, ReleaseError]:
    """Compare the requested version with the one computed from ``last``.

    Returns:
        Ok(next version) when they agree, otherwise an error naming the rule
        that was broken.
    """
    expected = next_version(release_type, last)

    if target.major != expected.major:
        if release_type == "major":
            return _validation(
                "a major release must increase the major version by 1 "
                f"(got {target.major}, expected {expected.major})"
            )
        return _validation(
            "a minor/bugfix/security release must not change the major version "
            f"(got {target.major}, expected {expected.major})"
        )

    if target.minor is not None and target.minor != expected.minor:
        if release_type == "major":
            return _validation(
                f"a major release must reset the minor version to 0 (got {target.minor})"
            )
        if release_type == "minor":
            return _validation(
                "a minor release must increase the minor version by 1 "
                f"(got {target}, expected {expected.major}.{expected.minor})"
            )
        return _validation(
            "a bugfix/security release must not change the minor version "
            f"(got {target}, expected {expected})"
        )

    if target.patch is not None and target.patch != expected.patch:
        if not is_patch_class(release_type):
            return _validation(
                f"a major/minor release must reset the patch version to 0 (got {target.patch})"
            )
        return _validation(
            "a bugfix/security release must increase the patch version by 1 "
            f"(got {target}, expected {expected})"
        )

    return Ok(expected)


def validate_release(
    release_type: ReleaseType,
    target: TargetVersion,
    branch: str,
    last: Version,
    *,
    major_branch: str,
) -> Result[Version, ReleaseError]:
    """All version and branch rules for one release request."""
    parsed = parse_branch(release_type, branch, major_branch=major_branch)
    if isinstance(parsed, Err):
        return parsed

    ok = check_branch(release_type, parsed.value, last, major_branch=major_branch)
    if isinstance(ok, Err):
        return ok

    return check_transition(release_type, last, target)
