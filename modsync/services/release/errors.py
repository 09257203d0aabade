from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from modsync.output.console import format_command

ReleaseErrorKind = Literal[
    "validation",
    "precondition",
    "resolution",
    "config",
    "aborted",
    "cleanup",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None


FailureReason = Literal["failed", "timed_out"]


@dataclass(frozen=True, slots=True)
class StepFailure:
    """A command of a module's release flow that did not succeed.

    Carries enough context to finish the module by hand.
    """

    module: str
    step: str
    command: tuple[str, ...]
    reason: FailureReason
    detail: str

    def describe(self) -> str:
        what = "timed out" if self.reason == "timed_out" else "failed"
        return f"{self.module}: {self.step} {what}: {format_command(self.command)}"
