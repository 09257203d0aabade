"""Release orchestration across the monorepo and its modules.

A release run has two phases:

``prepare``
    Validates the request against the local repository (branch shape, clean
    tree, in sync with origin, last tag, version arithmetic). Nothing is
    changed; every failure is a ``ReleaseError``.

``execute``
    After an explicit confirmation, clones every module (root first) into an
    ephemeral working directory, runs the branch flow and pushes, then
    publishes the hosted release. Module failures are collected as
    ``StepFailure``s in the ``ReleaseSummary`` instead of being raised.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from modsync.core.config import MANIFEST_NAME
from modsync.core.module import Module
from modsync.core.result import Err, Ok, Result
from modsync.git.repository import Repository
from modsync.output.console import ConsoleProtocol, Style, format_command
from modsync.output.prompts import PrompterProtocol
from modsync.platform.runner import ShellRunner
from modsync.services.release.errors import ReleaseError, StepFailure
from modsync.services.release.flow import FlowStep, plan_branch_flow, plan_push, run_branch_flow
from modsync.services.release.model import ReleaseContext
from modsync.services.release.notes import NEWLINE_TOKEN, publish_release, write_release_notes
from modsync.services.release.tags import resolve_last_tag
from modsync.services.release.versioning import (
    parse_branch,
    parse_release_type,
    parse_target_version,
    validate_release,
)
from modsync.services.release.workspace import WorkingDirectory


class CancellationToken:
    """Stops a release at the next module boundary once cancelled."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True, slots=True)
class ModuleOutcome:
    module: Module
    failure: StepFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    tag: str
    dry_run: bool
    outcomes: tuple[ModuleOutcome, ...]
    skipped: tuple[Module, ...] = ()
    cancelled: bool = False
    published: bool = False
    publish_failure: StepFailure | None = None
    release_url: str | None = None

    @property
    def failures(self) -> list[StepFailure]:
        out = [o.failure for o in self.outcomes if o.failure is not None]
        if self.publish_failure is not None:
            out.append(self.publish_failure)
        return out

    @property
    def ok(self) -> bool:
        return not self.failures and not self.skipped and not self.cancelled and self.published


def root_module(*, root: Path, monorepo_name: str) -> Module:
    """The root package, shaped like any other module."""
    return Module(name=monorepo_name, manifest_path=root / MANIFEST_NAME)


class ReleaseOrchestrator:
    def __init__(
        self,
        *,
        root: Path,
        runner: ShellRunner,
        console: ConsoleProtocol,
        prompter: PrompterProtocol,
        cancel_token: CancellationToken | None = None,
        temp_root: Path | None = None,
    ) -> None:
        self._root = root
        self._runner = runner
        self._console = console
        self._prompter = prompter
        self._cancel = cancel_token or CancellationToken()
        self._temp_root = temp_root
        self._local = Repository(root, runner)

    # ------------------------------------------------------------------
    # prepare
    # ------------------------------------------------------------------

    def prepare(
        self,
        *,
        release_type: str,
        version: str,
        monorepo_name: str,
        repository_base: str | None,
        major_branch: str,
        last_tag: str | None = None,
        skip_upmerge: bool = False,
        keep_going: bool = False,
    ) -> Result[ReleaseContext, ReleaseError]:
        """Validate a release request without changing anything."""
        rtype = parse_release_type(release_type)
        if isinstance(rtype, Err):
            return rtype
        target = parse_target_version(rtype.value, version)
        if isinstance(target, Err):
            return target

        branch_name = self._local.current_branch()
        if isinstance(branch_name, Err):
            return Err(
                ReleaseError(
                    kind="precondition",
                    message="failed to read the current branch",
                    hint=branch_name.error.message,
                )
            )
        branch = parse_branch(rtype.value, branch_name.value, major_branch=major_branch)
        if isinstance(branch, Err):
            return branch
        self._console.info(f"current branch: {branch.value.name}")

        ready = self.check_preconditions(branch.value.name)
        if isinstance(ready, Err):
            return ready

        if repository_base is None:
            return Err(
                ReleaseError(
                    kind="config",
                    message="missing repository base",
                    hint="set 'extra.module-sync.repository-base' in the root composer.json",
                )
            )

        ctx = ReleaseContext(
            release_type=rtype.value,
            target=target.value,
            dry_run=self._runner.dry_run,
            monorepo_name=monorepo_name,
            repository_base=repository_base,
            last_tag_override=last_tag,
            skip_upmerge=skip_upmerge,
            keep_going=keep_going,
            major_branch=major_branch,
        )

        resolved = resolve_last_tag(
            repo=self._local,
            release_type=ctx.release_type,
            target=ctx.target,
            override=ctx.last_tag_override,
            console=self._console,
            prompter=self._prompter,
        )
        if isinstance(resolved, Err):
            return resolved
        last = resolved.value
        self._console.info(f"last tag: {last.version} ({last.commit})")

        next_version = validate_release(
            ctx.release_type,
            ctx.target,
            branch.value.name,
            last.version,
            major_branch=major_branch,
        )
        if isinstance(next_version, Err):
            return next_version
        self._console.info(f"next version: {next_version.value}")
        self._console.info(f"using repository base: {repository_base}")

        return Ok(replace(ctx, last_tag=last))

    def check_preconditions(self, branch: str) -> Result[None, ReleaseError]:
        """The local repository must be clean and pushed."""
        status = self._local.status_entries()
        if isinstance(status, Err):
            return Err(
                ReleaseError(
                    kind="precondition",
                    message="failed to read working tree status",
                    hint=status.error.message,
                )
            )
        if status.value:
            paths = ", ".join(e.path for e in status.value[:5])
            return Err(
                ReleaseError(
                    kind="precondition",
                    message="there are uncommitted changes",
                    hint=f"commit or stash them first ({paths})",
                )
            )

        local = self._local.rev_parse("HEAD")
        remote = self._local.rev_parse(f"origin/{branch}")
        if isinstance(local, Err) or isinstance(remote, Err) or local.value != remote.value:
            return Err(
                ReleaseError(
                    kind="precondition",
                    message=f"branch '{branch}' is not in sync with origin",
                    hint="did you forget to push your changes?",
                )
            )
        return Ok(None)

    # ------------------------------------------------------------------
    # execute
    # ------------------------------------------------------------------

    def plan(self, ctx: ReleaseContext) -> tuple[FlowStep, ...]:
        """Steps every module goes through after being cloned."""
        branch_steps = plan_branch_flow(
            release_type=ctx.release_type,
            version=ctx.version,
            major_branch=ctx.major_branch,
            skip_upmerge=ctx.skip_upmerge,
        )
        return branch_steps + plan_push()

    def execute(
        self, ctx: ReleaseContext, modules: Sequence[Module]
    ) -> Result[ReleaseSummary, ReleaseError]:
        """Release ``ctx.tag`` for the root package and ``modules``.

        Returns:
            Err(ReleaseError) when the operator declines or the working
            directory cannot be created (nothing was changed), otherwise
            Ok(ReleaseSummary) describing what happened to each module.
        """
        root = root_module(root=self._root, monorepo_name=ctx.monorepo_name)
        targets = [root, *modules]
        steps = self.plan(ctx)

        self._print_plan(ctx, targets, steps)
        if not self._prompter.confirm("Continue?", default=False):
            return Err(ReleaseError(kind="aborted", message="aborted by operator"))

        workdir = WorkingDirectory.create(temp_root=self._temp_root)
        if isinstance(workdir, Err):
            return workdir

        try:
            summary = self._release_all(ctx, targets, steps, workdir.value)
            if not summary.failures and not summary.skipped and not summary.cancelled:
                summary = self._publish(ctx, summary, workdir.value, root)
            self._return_to_base_branch(ctx)
        finally:
            removed = workdir.value.remove()
            if isinstance(removed, Err):
                self._console.warning(removed.error.message)
                if removed.error.hint:
                    self._console.print(f"hint: {removed.error.hint}", Style.DIM)

        return Ok(summary)

    def _print_plan(
        self, ctx: ReleaseContext, targets: Sequence[Module], steps: Sequence[FlowStep]
    ) -> None:
        self._console.header(
            f"About to release {ctx.tag} for {len(targets)} modules (including monorepo)"
        )
        for module in targets:
            self._console.print(f"  {module.name}", Style.DIM)
        self._console.print("Steps per module:", Style.BOLD)
        self._console.print("  clone into a temporary directory", Style.DIM)
        for step in steps:
            self._console.print(f"  {step.description}: {format_command(step.command)}", Style.DIM)
        if ctx.dry_run:
            self._console.warning("dry run: no changes will be made")

    def _release_all(
        self,
        ctx: ReleaseContext,
        targets: Sequence[Module],
        steps: tuple[FlowStep, ...],
        workdir: WorkingDirectory,
    ) -> ReleaseSummary:
        outcomes: list[ModuleOutcome] = []
        for i, module in enumerate(targets):
            remaining = tuple(targets[i:])
            if self._cancel.cancelled:
                self._console.warning("release cancelled")
                return ReleaseSummary(
                    tag=ctx.tag,
                    dry_run=ctx.dry_run,
                    outcomes=tuple(outcomes),
                    skipped=remaining,
                    cancelled=True,
                )

            outcome = self.release_module(ctx, module, steps, workdir)
            outcomes.append(outcome)
            if outcome.failure is not None:
                self._console.error(outcome.failure.describe())
                if not ctx.keep_going:
                    return ReleaseSummary(
                        tag=ctx.tag,
                        dry_run=ctx.dry_run,
                        outcomes=tuple(outcomes),
                        skipped=remaining[1:],
                    )

        return ReleaseSummary(tag=ctx.tag, dry_run=ctx.dry_run, outcomes=tuple(outcomes))

    def release_module(
        self,
        ctx: ReleaseContext,
        module: Module,
        steps: tuple[FlowStep, ...],
        workdir: WorkingDirectory,
    ) -> ModuleOutcome:
        self._console.header(f"==== {module.name}")
        url = ctx.clone_url(module.slug)
        dest = workdir.module_dir(module)

        cloned = Repository.clone(url, dest, self._runner)
        if isinstance(cloned, Err):
            e = cloned.error
            return ModuleOutcome(
                module=module,
                failure=StepFailure(
                    module=module.name,
                    step="clone",
                    command=e.command,
                    reason="timed_out" if e.timed_out else "failed",
                    detail=e.message,
                ),
            )

        ran = run_branch_flow(
            module=module.name, repo=cloned.value, steps=steps, console=self._console
        )
        if isinstance(ran, Err):
            return ModuleOutcome(module=module, failure=ran.error)
        self._console.success(f"{module.name}: {ctx.tag} released")
        return ModuleOutcome(module=module)

    def _publish(
        self,
        ctx: ReleaseContext,
        summary: ReleaseSummary,
        workdir: WorkingDirectory,
        root: Module,
    ) -> ReleaseSummary:
        self._console.header(f"Release notes for {ctx.tag}")
        self._console.print(f"The token '{NEWLINE_TOKEN}' is replaced by a line break.", Style.DIM)
        raw = self._prompter.text("Release notes")

        written = write_release_notes(working_dir=workdir.path, tag=ctx.tag, raw=raw)
        if isinstance(written, Err):
            failure = StepFailure(
                module=ctx.monorepo_name,
                step="release",
                command=(),
                reason="failed",
                detail=written.error.message,
            )
            return replace(summary, publish_failure=failure)

        published = publish_release(
            runner=self._runner,
            repo_root=workdir.module_dir(root),
            module=ctx.monorepo_name,
            tag=ctx.tag,
            target=ctx.base_branch,
            notes_file=written.value,
        )
        if isinstance(published, Err):
            self._console.error(published.error.describe())
            return replace(summary, publish_failure=published.error)

        return replace(summary, published=True, release_url=published.value or None)

    def _return_to_base_branch(self, ctx: ReleaseContext) -> None:
        """Leave the local repository on the release's maintenance branch."""
        for result in (self._local.fetch(), self._local.checkout(ctx.base_branch)):
            if isinstance(result, Err):
                self._console.warning(
                    f"could not check out {ctx.base_branch} locally: {result.error.message}"
                )
                return
