"""Tests for modsync.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from modsync.core.result import Err, Ok
from modsync.platform.process import ProcessError, run


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("git", "push", "--all", "origin"), 1, "", "")
        assert str(error) == "git push --all ... failed (exit 1)"

    def test_str_timed_out(self) -> None:
        error = ProcessError(("git", "fetch"), -1, "", "", timed_out=True)
        assert str(error) == "git fetch timed out"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", " err \n").detail == "err"
        assert ProcessError(("x",), 1, "out\n", "").detail == "out"
        assert ProcessError(("x",), 2, "", "").detail == "x failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(42)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert "bad" in result.error.stderr
        assert result.error.timed_out is False

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_timeout_is_reported(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.timed_out is True
        assert "timed out" in str(result.error)

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("content")

        result = run([sys.executable, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "marker.txt" in result.value

    def test_undecodable_stdout_is_replaced(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'caf\\xe9')"],
            cwd=tmp_path,
        )

        assert result == Ok("caf\ufffd")

    def test_undecodable_output_on_failure_is_an_error(self, tmp_path: Path) -> None:
        result = run(
            [
                sys.executable,
                "-c",
                "import sys; sys.stderr.buffer.write(b'caf\\xe9'); sys.exit(1)",
            ],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert result.error.stderr == "caf\ufffd"
