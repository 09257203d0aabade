"""Platform abstraction layer: processes, files, command runner."""

from .files import atomic_write_text, remove_tree
from .process import ProcessError, run
from .runner import Executor, ShellRunner

__all__ = [
    "Executor",
    "ProcessError",
    "ShellRunner",
    "atomic_write_text",
    "remove_tree",
    "run",
]
