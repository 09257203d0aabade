"""Operator prompts.

Release code asks three kinds of questions: a yes/no confirmation before any
mutation, a choice when the last tag cannot be determined automatically, and
free text for release notes. They go through ``PrompterProtocol`` so the
orchestrator runs headless in tests with ``ScriptedPrompter``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

__all__ = [
    "PrompterProtocol",
    "ScriptedPrompter",
    "TyperPrompter",
]


class PrompterProtocol(Protocol):
    @property
    def interactive(self) -> bool:
        """False when nobody can answer (no TTY); choices must not be asked."""
        ...

    def confirm(self, question: str, *, default: bool = False) -> bool: ...

    def choose(self, question: str, options: Sequence[str], *, default: str | None = None) -> str:
        """Return one of ``options``."""
        ...

    def text(self, question: str) -> str: ...


class TyperPrompter:
    """Prompts on the terminal using typer."""

    def __init__(self, *, interactive: bool) -> None:
        self._interactive = interactive

    @property
    def interactive(self) -> bool:
        return self._interactive

    def confirm(self, question: str, *, default: bool = False) -> bool:
        import typer

        return bool(typer.confirm(question, default=default))

    def choose(self, question: str, options: Sequence[str], *, default: str | None = None) -> str:
        import typer

        if not options:
            raise ValueError("choose() needs at least one option")

        default_idx = options.index(default) + 1 if default in options else 1
        typer.echo(question)
        for i, option in enumerate(options, start=1):
            typer.echo(f"  [{i}] {option}")

        while True:
            raw = typer.prompt("Pick a number", default=str(default_idx))
            try:
                idx = int(raw.strip())
            except ValueError:
                typer.echo("Please enter a number.")
                continue
            if 1 <= idx <= len(options):
                return options[idx - 1]
            typer.echo(f"Please pick between 1 and {len(options)}.")

    def text(self, question: str) -> str:
        import typer

        return str(typer.prompt(question, default="", show_default=False))


def _empty_bools() -> list[bool]:
    return []


def _empty_strs() -> list[str]:
    return []


@dataclass
class ScriptedPrompter:
    """Prompter answering from pre-recorded lists, for tests.

    Raises AssertionError when a question is asked that has no scripted answer.
    """

    confirms: list[bool] = field(default_factory=_empty_bools)
    choices: list[str] = field(default_factory=_empty_strs)
    texts: list[str] = field(default_factory=_empty_strs)
    is_interactive: bool = True
    asked: list[str] = field(default_factory=_empty_strs)

    @property
    def interactive(self) -> bool:
        return self.is_interactive

    def confirm(self, question: str, *, default: bool = False) -> bool:
        self.asked.append(question)
        if not self.confirms:
            raise AssertionError(f"unexpected confirm: {question}")
        return self.confirms.pop(0)

    def choose(self, question: str, options: Sequence[str], *, default: str | None = None) -> str:
        self.asked.append(question)
        if not self.choices:
            raise AssertionError(f"unexpected choice: {question}")
        answer = self.choices.pop(0)
        if answer not in options:
            raise AssertionError(f"scripted choice {answer!r} not in {list(options)}")
        return answer

    def text(self, question: str) -> str:
        self.asked.append(question)
        if not self.texts:
            raise AssertionError(f"unexpected text prompt: {question}")
        return self.texts.pop(0)
