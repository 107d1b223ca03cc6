"""Exit codes for the publish step.

CI systems only see the process exit status, so each failure family maps to
a stable code.
"""

from enum import IntEnum

__all__ = ["ErrorCode", "error_code_for_kind"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: Configuration error (bad input, malformed entries)
    - 2: Authentication error (service account unusable)
    - 3: Remote error (Google Play rejected a call)
    - 4: Build error (release could not be assembled)
    - 5: I/O error (file not found, permission denied)
    """

    OK = 0
    CONFIG_ERROR = 1
    AUTH_ERROR = 2
    REMOTE_ERROR = 3
    BUILD_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK


_KIND_CODES: dict[str, ErrorCode] = {
    "invalid_config": ErrorCode.CONFIG_ERROR,
    "auth_failed": ErrorCode.AUTH_ERROR,
    "remote_rejected": ErrorCode.REMOTE_ERROR,
    "build_failure": ErrorCode.BUILD_ERROR,
    "io_error": ErrorCode.IO_ERROR,
}


def error_code_for_kind(kind: str) -> ErrorCode:
    """Map a publish error kind to its exit code (unknown kinds -> config error)."""
    return _KIND_CODES.get(kind, ErrorCode.CONFIG_ERROR)
