from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import typer

from modsync.core.config import MANIFEST_NAME, ProjectConfig, load_config
from modsync.core.errors import ErrorCode
from modsync.core.result import Err
from modsync.output.console import ConsoleProtocol, RichConsole, Style
from modsync.output.prompts import PrompterProtocol, TyperPrompter


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ProjectConfig
    console: ConsoleProtocol
    prompter: PrompterProtocol


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def detect_root() -> Path:
    env = os.environ.get("MODSYNC_ROOT")
    if env:
        return Path(env)
    return Path.cwd()


def build_context() -> CLIContext:
    console = RichConsole()
    root = detect_root()

    config_result = load_config(root / MANIFEST_NAME)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        console.print("hint: run modsync from the monorepo root or pass --root", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        root=root,
        config=config_result.value,
        console=console,
        prompter=TyperPrompter(interactive=is_interactive_terminal()),
    )
