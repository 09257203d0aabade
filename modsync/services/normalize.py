"""Manifest normalization through ``composer normalize``.

Paths are passed as separate arguments, so no escaping is needed on any
platform.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modsync.core.module import Module
from modsync.core.result import Err
from modsync.output.console import ConsoleProtocol
from modsync.platform.runner import ShellRunner
from modsync.platform.timeouts import COMPOSER_TIMEOUT_SECONDS


@dataclass
class NormalizeReport:
    normalized: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    stopped: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


def normalize_command(
    *, manifest: Path | None, dry_run: bool, diff: bool
) -> list[str]:
    cmd = ["composer", "normalize"]
    if dry_run:
        cmd.append("--dry-run")
    if diff:
        cmd.append("--diff")
    if manifest is not None:
        cmd += ["--", str(manifest)]
    return cmd


def normalize_manifests(
    *,
    root: Path,
    modules: list[Module],
    include_root: bool,
    dry_run: bool,
    diff: bool,
    force: bool,
    runner: ShellRunner,
    console: ConsoleProtocol,
) -> NormalizeReport:
    """Normalize the root manifest and module manifests.

    In ``dry_run`` mode the normalizer only reports; a manifest that would
    change is a warning. Otherwise a failure stops the run unless ``force``.
    """
    report = NormalizeReport()
    targets: list[tuple[str, Path | None]] = []
    if include_root:
        targets.append(("main composer.json", None))
    targets += [(m.name, m.manifest_path) for m in modules]

    for label, manifest in targets:
        console.info(f"normalizing {label}")
        cmd = normalize_command(manifest=manifest, dry_run=dry_run, diff=diff)
        result = runner.execute(cmd, cwd=root, timeout=COMPOSER_TIMEOUT_SECONDS)
        if not isinstance(result, Err):
            if result.value:
                console.print(result.value)
            report.normalized.append(label)
            continue

        report.failed.append(label)
        if result.error.stdout.strip():
            console.print(result.error.stdout.strip())
        if dry_run:
            console.warning(f"{label} is not normalized")
            continue

        console.error(f"failed to normalize {label}: {result.error.detail}")
        if not force:
            report.stopped = True
            return report

    return report
