"""Monorepo modules.

A module is a sub-directory of the modules directory that contains a
``composer.json``. The root package is modelled the same way so release code
can treat every repository uniformly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from modsync.platform.files import atomic_write_text

from .config import MANIFEST_NAME
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict

__all__ = ["Module", "ModuleError", "discover_modules", "select_modules"]


@dataclass(frozen=True, slots=True)
class ModuleError:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Module:
    """A module of the monorepo.

    Attributes:
        name: Directory name of the module (or the monorepo name for the root).
        manifest_path: Path to the module's composer.json.
    """

    name: str
    manifest_path: Path

    @property
    def slug(self) -> str:
        """Lowercased name, used for clone URLs and clone directories."""
        return self.name.lower()

    def read_manifest(self) -> Result[StrDict, ModuleError]:
        try:
            raw = self.manifest_path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(ModuleError(f"cannot read {self.manifest_path}: {e}", self.manifest_path))

        try:
            obj: object = json.loads(raw)
        except json.JSONDecodeError as e:
            return Err(ModuleError(f"invalid JSON in {self.manifest_path}: {e}", self.manifest_path))

        data = as_str_dict(obj)
        if data is None:
            return Err(ModuleError(f"{self.manifest_path} is not a JSON object", self.manifest_path))
        return Ok(data)

    def write_manifest(self, data: StrDict) -> Result[None, ModuleError]:
        # Composer style: 4-space indent, slashes unescaped.
        content = json.dumps(data, indent=4, ensure_ascii=False) + "\n"
        try:
            atomic_write_text(self.manifest_path, content)
        except OSError as e:
            return Err(ModuleError(f"cannot write {self.manifest_path}: {e}", self.manifest_path))
        return Ok(None)

    def add_requirement(self, requirement: str, version: str) -> Result[None, ModuleError]:
        """Set ``require[requirement] = version`` (adds or updates)."""
        data = self.read_manifest()
        if isinstance(data, Err):
            return data

        manifest = data.value
        require = as_str_dict(manifest.get("require")) or {}
        require[requirement] = version
        manifest["require"] = require
        return self.write_manifest(manifest)


def discover_modules(modules_dir: Path) -> Result[list[Module], ModuleError]:
    """List modules of a modules directory, sorted by name.

    Entries without a composer.json are ignored.
    """
    if not modules_dir.is_dir():
        return Err(ModuleError(f"modules directory does not exist: {modules_dir}", modules_dir))

    modules: list[Module] = []
    for entry in sorted(modules_dir.iterdir(), key=lambda p: p.name):
        manifest = entry / MANIFEST_NAME
        if entry.is_dir() and manifest.is_file():
            modules.append(Module(name=entry.name, manifest_path=manifest))
    return Ok(modules)


def select_modules(modules: list[Module], names: list[str]) -> list[Module]:
    """Filter modules by name; an empty selection keeps every module."""
    if not names:
        return list(modules)
    wanted = set(names)
    return [m for m in modules if m.name in wanted]
