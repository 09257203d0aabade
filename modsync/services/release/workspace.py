"""Ephemeral working directory of a release run.

Each run clones every module into ``<tempdir>/modsync/<run id>/<module>``.
The directory belongs to one run only and is removed when the run ends.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from uuid import uuid4

from modsync.core.module import Module
from modsync.core.result import Err, Ok, Result
from modsync.platform.files import remove_tree
from modsync.services.release.errors import ReleaseError

WORKSPACE_DIR_NAME = "modsync"


class WorkingDirectory:
    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def create(cls, *, temp_root: Path | None = None) -> Result[WorkingDirectory, ReleaseError]:
        base = temp_root if temp_root is not None else Path(tempfile.gettempdir())
        path = base / WORKSPACE_DIR_NAME / uuid4().hex
        try:
            path.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io",
                    message=f"failed to create working directory: {e}",
                    hint=str(path),
                )
            )
        return Ok(cls(path))

    def module_dir(self, module: Module) -> Path:
        return self.path / module.slug

    def remove(self) -> Result[None, ReleaseError]:
        try:
            remove_tree(self.path)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="cleanup",
                    message=f"failed to remove working directory: {e}",
                    hint=f"delete {self.path} manually",
                )
            )
        return Ok(None)
