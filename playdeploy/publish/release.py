"""Track release construction.

The status/fraction rules are pure functions; only the release notes read
touches the filesystem.
"""

from __future__ import annotations

from collections.abc import Sequence

from playdeploy.core.result import Err, Ok, Result
from playdeploy.output.console import ConsoleProtocol
from playdeploy.publish.config import ReleaseConfig
from playdeploy.publish.errors import PublishError
from playdeploy.publish.model import LocalizedText, ReleaseDescriptor, ReleaseStatus
from playdeploy.publish.whatsnew import read_localized_notes


def status_from_user_fraction(user_fraction: float) -> ReleaseStatus:
    """A non-zero fraction means a staged rollout."""
    if user_fraction != 0:
        return ReleaseStatus.IN_PROGRESS
    return ReleaseStatus.COMPLETED


def resolve_status(status: str, user_fraction: float) -> ReleaseStatus:
    """Explicit status wins; an empty one is derived from the fraction.

    Raises:
        ValueError: ``status`` is not a known release status.
    """
    if status:
        return ReleaseStatus(status)
    return status_from_user_fraction(user_fraction)


def should_apply_user_fraction(status: ReleaseStatus) -> bool:
    return status.accepts_user_fraction


def resolve_user_fraction(status: ReleaseStatus, user_fraction: float) -> float | None:
    """Fraction to send with ``status``, or None.

    Google Play rejects a fraction on completed and draft releases, so it is
    dropped for those even when configured. A zero fraction is never sent.
    """
    if not should_apply_user_fraction(status) or user_fraction == 0:
        return None
    return user_fraction


def build_release(
    config: ReleaseConfig,
    version_codes: Sequence[int],
    *,
    console: ConsoleProtocol | None = None,
) -> Result[ReleaseDescriptor, PublishError]:
    """Build the release for ``version_codes`` from ``config``."""
    codes = tuple(dict.fromkeys(version_codes))
    if not codes:
        return Err(PublishError(kind="build_failure", message="failed to create release, no version codes"))

    try:
        status = resolve_status(config.status, config.user_fraction)
    except ValueError:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"failed to create release, invalid status: {config.status}",
                hint=f"expected one of: {', '.join(str(s) for s in ReleaseStatus)}",
            )
        )

    if console is not None:
        console.info(f"Release version codes are: {list(codes)}")
        if not config.status and status is ReleaseStatus.IN_PROGRESS:
            console.info(
                f"Release is a staged rollout, {config.user_fraction} of users will receive it."
            )

    user_fraction = resolve_user_fraction(status, config.user_fraction)
    if user_fraction is None and config.user_fraction and console is not None:
        console.debug(f"user fraction {config.user_fraction} ignored for status '{status}'")

    release_notes: tuple[LocalizedText, ...] = ()
    if config.whatsnews_dir is not None:
        if console is not None:
            console.debug(f"Reading release notes from '{config.whatsnews_dir}'")
        notes = read_localized_notes(config.whatsnews_dir, console=console)
        if isinstance(notes, Err):
            return Err(notes.error.wrap("build_failure", "failed to update listing"))
        release_notes = tuple(
            LocalizedText(language=language, text=text) for language, text in notes.value.items()
        )

    return Ok(
        ReleaseDescriptor(
            version_codes=codes,
            status=status,
            in_app_update_priority=config.update_priority,
            user_fraction=user_fraction,
            name=config.release_name or None,
            release_notes=release_notes,
        )
    )
