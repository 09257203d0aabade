from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from modsync.core.config import DEFAULT_MAJOR_BRANCH


ReleaseType = Literal["major", "minor", "bugfix", "security"]
RELEASE_TYPES: tuple[ReleaseType, ...] = ("major", "minor", "bugfix", "security")

# Commit reported for a last tag given with --last-tag.
OVERRIDDEN_COMMIT = "overridden"


def is_patch_class(release_type: ReleaseType) -> bool:
    """bugfix and security releases only move the patch number."""
    return release_type in ("bugfix", "security")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def to_tag(self) -> str:
        return f"v{self}"

    @property
    def minor_branch(self) -> str:
        return f"{self.major}.x"

    @property
    def patch_branch(self) -> str:
        return f"{self.major}.{self.minor}.x"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, slots=True)
class TargetVersion:
    """The version requested on the command line.

    A major release is requested as ``N`` and a minor one as ``N.N``; the
    missing components stand for the value being computed (0), never for the
    last tag's value.
    """

    major: int
    minor: int | None = None
    patch: int | None = None

    def resolve(self) -> Version:
        return Version(self.major, self.minor or 0, self.patch or 0)

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.patch]
        return ".".join(str(p) for p in parts if p is not None)


@dataclass(frozen=True, slots=True)
class BranchRef:
    """A branch name whose shape matched a release type.

    ``major`` and ``minor`` are None where the shape has no such component
    (the major-release branch has neither).
    """

    name: str
    major: int | None = None
    minor: int | None = None


@dataclass(frozen=True, slots=True)
class LastTag:
    version: Version
    commit: str

    @property
    def overridden(self) -> bool:
        return self.commit == OVERRIDDEN_COMMIT


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Validated input of one release run.

    Built once the command line passed validation; the only later change is
    a copy carrying the resolved ``last_tag``.
    """

    release_type: ReleaseType
    target: TargetVersion
    dry_run: bool
    monorepo_name: str
    repository_base: str
    last_tag_override: str | None = None
    skip_upmerge: bool = False
    keep_going: bool = False
    major_branch: str = DEFAULT_MAJOR_BRANCH
    last_tag: LastTag | None = None

    @property
    def version(self) -> Version:
        return self.target.resolve()

    @property
    def tag(self) -> str:
        return self.version.to_tag()

    @property
    def base_branch(self) -> str:
        """Maintenance branch of the release (target of the hosted release)."""
        return self.version.patch_branch

    def clone_url(self, module_slug: str) -> str:
        return f"{self.repository_base}{module_slug}"
