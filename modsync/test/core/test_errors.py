from __future__ import annotations

from modsync.core.errors import ErrorCode


def test_exit_codes_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.RELEASE_FAILED) == 3
    assert int(ErrorCode.SYNC_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5


def test_str_is_human_readable() -> None:
    assert str(ErrorCode.RELEASE_FAILED) == "release failed"


def test_is_success() -> None:
    assert ErrorCode.OK.is_success
    assert not ErrorCode.SYNC_ERROR.is_success
