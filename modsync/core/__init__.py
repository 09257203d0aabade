"""Core domain types and logic."""

from .config import ConfigError, ModuleSyncConfig, ProjectConfig, load_config
from .errors import ErrorCode
from .module import Module, ModuleError, discover_modules, select_modules
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "ModuleSyncConfig",
    "ProjectConfig",
    "load_config",
    # errors
    "ErrorCode",
    # module
    "Module",
    "ModuleError",
    "discover_modules",
    "select_modules",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
