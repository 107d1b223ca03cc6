"""Tests for playdeploy.core.errors module."""

import pytest

from playdeploy.core.errors import ErrorCode, error_code_for_kind


class TestErrorCodeValues:
    """Exit codes are part of the CI contract and must stay stable."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.CONFIG_ERROR == 1
        assert ErrorCode.AUTH_ERROR == 2
        assert ErrorCode.REMOTE_ERROR == 3
        assert ErrorCode.BUILD_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_str_is_readable(self) -> None:
        assert str(ErrorCode.REMOTE_ERROR) == "remote error"

    def test_success_flags(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.OK.is_error is False
        assert ErrorCode.IO_ERROR.is_error is True


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("invalid_config", ErrorCode.CONFIG_ERROR),
        ("auth_failed", ErrorCode.AUTH_ERROR),
        ("remote_rejected", ErrorCode.REMOTE_ERROR),
        ("build_failure", ErrorCode.BUILD_ERROR),
        ("io_error", ErrorCode.IO_ERROR),
    ],
)
def test_error_code_for_kind(kind: str, code: ErrorCode) -> None:
    assert error_code_for_kind(kind) == code


def test_unknown_kind_is_config_error() -> None:
    assert error_code_for_kind("something_else") == ErrorCode.CONFIG_ERROR
