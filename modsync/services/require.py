from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from modsync.core.module import Module
from modsync.core.result import Err, Ok, Result
from modsync.output.console import ConsoleProtocol
from modsync.platform.runner import ShellRunner
from modsync.platform.timeouts import COMPOSER_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class RequireError:
    message: str
    hint: str | None = None


def add_requirement(
    *,
    root: Path,
    modules: list[Module],
    requirement: str,
    version: str,
    include_root: bool,
    runner: ShellRunner,
    console: ConsoleProtocol,
) -> Result[None, RequireError]:
    """Require ``requirement@version`` in the root package and in ``modules``.

    The root goes through ``composer require`` so its lock file follows;
    module manifests are edited directly.
    """
    if include_root:
        result = runner.execute(
            ["composer", "require", requirement, version],
            cwd=root,
            timeout=COMPOSER_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                RequireError(
                    message=f"composer require {requirement} failed",
                    hint=result.error.detail,
                )
            )

    for module in modules:
        edited = module.add_requirement(requirement, version)
        if isinstance(edited, Err):
            return Err(RequireError(message=edited.error.message))
        console.success(f"{module.name}: require {requirement}@{version}")

    return Ok(None)
