"""Requirement synchronization between the root package and its modules.

Every requirement of a module must either be required by the root package
with the very same constraint, or be replaced by the root package. Root
requirements that no module uses are reported as removable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modsync.core.config import MANIFEST_NAME, ProjectConfig
from modsync.core.module import Module
from modsync.core.result import Err
from modsync.core.structured import get_str, get_str_map


@dataclass(frozen=True, slots=True)
class RequirementMismatch:
    """A module requirement that is not in sync with the root.

    ``root_constraint`` is None when the root does not require the package.
    """

    module: str
    requirement: str
    constraint: str
    root_constraint: str | None

    def describe(self) -> str:
        if self.root_constraint is None:
            return (
                f"module {self.module} requires {self.requirement}@{self.constraint}, "
                "but the root composer.json does not"
            )
        return (
            f"module {self.module} requires {self.requirement}@{self.constraint}, "
            f"but the root composer.json requires {self.root_constraint}"
        )


@dataclass(frozen=True, slots=True)
class SkippedModule:
    name: str
    reason: str


@dataclass
class SyncReport:
    checked: list[str] = field(default_factory=list)
    mismatches: list[RequirementMismatch] = field(default_factory=list)
    unused: list[str] = field(default_factory=list)
    skipped: list[SkippedModule] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return not self.mismatches


def module_candidates(modules_dir: Path) -> list[Path]:
    """Module directories, sorted by name (manifest presence not checked)."""
    return sorted((p for p in modules_dir.iterdir() if p.is_dir()), key=lambda p: p.name)


def check_sync(project: ProjectConfig, module_dirs: list[Path]) -> SyncReport:
    report = SyncReport()
    used = {name: False for name in project.requires}

    for directory in module_dirs:
        manifest = directory / MANIFEST_NAME
        if not manifest.is_file():
            report.skipped.append(SkippedModule(directory.name, f"no {MANIFEST_NAME}"))
            continue

        data = Module(name=directory.name, manifest_path=manifest).read_manifest()
        if isinstance(data, Err):
            report.skipped.append(SkippedModule(directory.name, data.error.message))
            continue

        name = get_str(data.value, "name") or directory.name
        report.checked.append(name)
        for requirement, constraint in get_str_map(data.value, "require").items():
            if requirement in project.requires:
                root_constraint = project.requires[requirement]
                if root_constraint == constraint:
                    used[requirement] = True
                else:
                    report.mismatches.append(
                        RequirementMismatch(name, requirement, constraint, root_constraint)
                    )
            elif requirement not in project.replaces:
                report.mismatches.append(RequirementMismatch(name, requirement, constraint, None))

    report.unused = [name for name, seen in used.items() if not seen]
    return report
