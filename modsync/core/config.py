"""Typed access to the root manifest.

The monorepo root carries a ``composer.json``. modsync reads its package name,
its ``require`` and ``replace`` sections, and its own settings under
``extra.module-sync``:

    {
        "extra": {
            "module-sync": {
                "repository-base": "git@github.com:acme/",
                "major-branch": "main",
                "modules-dir": "modules"
            }
        }
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import as_str_dict, get_path, get_str, get_str_map

__all__ = [
    "DEFAULT_MAJOR_BRANCH",
    "DEFAULT_MODULES_DIR",
    "MANIFEST_NAME",
    "ConfigError",
    "ModuleSyncConfig",
    "ProjectConfig",
    "load_config",
]

MANIFEST_NAME = "composer.json"
DEFAULT_MAJOR_BRANCH = "main"
DEFAULT_MODULES_DIR = "modules"

_EXTRA_KEY = "module-sync"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the root manifest cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ModuleSyncConfig:
    """Settings from ``extra.module-sync``."""

    repository_base: str | None = None
    major_branch: str = DEFAULT_MAJOR_BRANCH
    modules_dir: str = DEFAULT_MODULES_DIR


def _empty_map() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """The root package as far as modsync is concerned."""

    name: str | None = None
    requires: dict[str, str] = field(default_factory=_empty_map)
    replaces: dict[str, str] = field(default_factory=_empty_map)
    module_sync: ModuleSyncConfig = field(default_factory=ModuleSyncConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ProjectConfig:
        """Create a ProjectConfig from a parsed manifest."""
        extra = as_str_dict(get_path(data, "extra", _EXTRA_KEY)) or {}
        return cls(
            name=get_str(data, "name"),
            requires=get_str_map(data, "require"),
            replaces=get_str_map(data, "replace"),
            module_sync=ModuleSyncConfig(
                repository_base=get_str(extra, "repository-base"),
                major_branch=get_str(extra, "major-branch") or DEFAULT_MAJOR_BRANCH,
                modules_dir=get_str(extra, "modules-dir") or DEFAULT_MODULES_DIR,
            ),
        )


def load_config(path: Path) -> Result[ProjectConfig, ConfigError]:
    """Load the root manifest.

    Args:
        path: Path to the root ``composer.json``.

    Returns:
        Ok(ProjectConfig) on success, Err(ConfigError) if the file is missing,
        unreadable or not a JSON object.
    """
    if not path.is_file():
        return Err(ConfigError(message=f"root manifest not found: {path}", path=path))

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(ConfigError(message=f"cannot read root manifest: {e}", path=path))

    try:
        obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(ConfigError(message=f"invalid JSON in {path.name}: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigError(message=f"{path.name} must contain a JSON object", path=path))

    return Ok(ProjectConfig.from_dict(data))
