"""Output abstraction layer: console and prompts."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
    format_command,
)
from .prompts import PrompterProtocol, ScriptedPrompter, TyperPrompter

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PrompterProtocol",
    "RichConsole",
    "ScriptedPrompter",
    "Style",
    "TyperPrompter",
    "format_command",
]
