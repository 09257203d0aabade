"""Per-module branch, tag and up-merge flow.

``plan_branch_flow`` decides what happens to one module's clone for a release
type; ``run_branch_flow`` issues the planned git commands one after the
other. The plan is the same in dry-run and armed mode, only the runner
behind the repository differs.

Branch model (``M.m.p`` being the release version)::

    main ── tag vM.0.0 ──┬─ M.x ── tag vM.m.0 ──┬─ M.m.x ── tag vM.m.p
                         └─ M.0.x               └─ (up-merged into M.x, then main)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from modsync.core.result import Err, Ok, Result
from modsync.git.repository import Repository
from modsync.output.console import ConsoleProtocol, Style
from modsync.services.release.errors import StepFailure
from modsync.services.release.model import ReleaseType, Version

StepName = Literal["clone", "checkout", "tag", "branch", "merge", "push"]


@dataclass(frozen=True, slots=True)
class FlowStep:
    name: StepName
    description: str
    args: tuple[str, ...]

    @property
    def command(self) -> tuple[str, ...]:
        return ("git", *self.args)


def _checkout(branch: str, why: str) -> FlowStep:
    return FlowStep("checkout", why, ("checkout", branch))


def _tag(tag: str, branch: str) -> FlowStep:
    return FlowStep("tag", f"tag {branch} as {tag}", ("tag", tag))


def _branch(branch: str, what: str) -> FlowStep:
    return FlowStep("branch", f"create {what} branch {branch}", ("branch", branch))


def _merge(source: str, target: str) -> FlowStep:
    return FlowStep("merge", f"up-merge {source} into {target}", ("merge", "--no-edit", source))


def plan_branch_flow(
    *,
    release_type: ReleaseType,
    version: Version,
    major_branch: str,
    skip_upmerge: bool,
) -> tuple[FlowStep, ...]:
    """Steps that tag ``version`` and maintain the release branches."""
    tag = version.to_tag()
    minor_branch = version.minor_branch
    patch_branch = version.patch_branch

    if release_type == "major":
        return (
            _checkout(major_branch, f"switch to major release branch {major_branch}"),
            _tag(tag, major_branch),
            _branch(minor_branch, "minor"),
            _branch(f"{version.major}.0.x", "patch"),
        )

    if release_type == "minor":
        steps = [
            _checkout(minor_branch, f"switch to minor branch {minor_branch}"),
            _tag(tag, minor_branch),
            _branch(patch_branch, "patch"),
        ]
        if not skip_upmerge:
            steps += [
                _checkout(major_branch, f"switch to major release branch {major_branch}"),
                _merge(minor_branch, major_branch),
            ]
        return tuple(steps)

    steps = [
        _checkout(patch_branch, f"switch to patch branch {patch_branch}"),
        _tag(tag, patch_branch),
    ]
    if not skip_upmerge:
        steps += [
            _checkout(minor_branch, f"switch to minor branch {minor_branch}"),
            _merge(patch_branch, minor_branch),
            _checkout(major_branch, f"switch to major release branch {major_branch}"),
            _merge(minor_branch, major_branch),
        ]
    return tuple(steps)


def plan_push(remote: str = "origin") -> tuple[FlowStep, ...]:
    # --all does not include tags.
    return (
        FlowStep("push", f"push all branches to {remote}", ("push", "--all", remote)),
        FlowStep("push", f"push tags to {remote}", ("push", "--tags", remote)),
    )


def run_branch_flow(
    *,
    module: str,
    repo: Repository,
    steps: Sequence[FlowStep],
    console: ConsoleProtocol,
) -> Result[int, StepFailure]:
    """Run steps in order, stopping at the first failure.

    Returns:
        Ok(number of steps run) or Err(StepFailure) for the step that failed.
    """
    for step in steps:
        console.print(step.description, Style.INFO)
        result = repo.git(step.args)
        if isinstance(result, Err):
            e = result.error
            return Err(
                StepFailure(
                    module=module,
                    step=step.name,
                    command=step.command,
                    reason="timed_out" if e.timed_out else "failed",
                    detail=e.message,
                )
            )
    return Ok(len(steps))
