"""Error types for the publish bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "invalid_config",
    "io_error",
    "remote_rejected",
    "build_failure",
    "auth_failed",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    """Canonical publish error payload.

    ``message`` already names the failed operation and the file or entry
    involved; ``hint`` is optional extra context rendered by the CLI.
    """

    kind: PublishErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    def wrap(self, kind: PublishErrorKind, context: str) -> PublishError:
        """Return a new error of ``kind`` with ``context`` prepended to the message."""
        return PublishError(kind=kind, message=f"{context}, reason: {self.message}", hint=self.hint)
