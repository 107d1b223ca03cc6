from __future__ import annotations

import re
from pathlib import Path

from playdeploy.core.result import Err, Ok, Result
from playdeploy.output.console import ConsoleProtocol
from playdeploy.publish.errors import PublishError
from playdeploy.publish.model import LocaleNotesMap

WHATSNEW_GLOB = "whatsnew-*"

# BCP-47 language tag of the listing, e.g. whatsnew-en-US -> en-US
_WHATSNEW_NAME = re.compile(r"whatsnew-(?P<locale>[0-9A-Za-z].*)")


def locale_from_filename(name: str) -> str | None:
    match = _WHATSNEW_NAME.fullmatch(name)
    if match is None:
        return None
    return match.group("locale")


def read_localized_notes(
    directory: Path,
    *,
    console: ConsoleProtocol | None = None,
) -> Result[LocaleNotesMap, PublishError]:
    """Read every ``whatsnew-<locale>`` file of ``directory``.

    Returns an empty map when no file matches. Any read failure aborts the
    whole read; no partial map is returned.
    """
    if not directory.is_dir():
        return Err(
            PublishError(
                kind="io_error",
                message=f"failed to list release notes directory: {directory}",
                hint="directory does not exist or is not a directory",
            )
        )

    try:
        paths = sorted(directory.glob(WHATSNEW_GLOB))
    except OSError as e:
        return Err(
            PublishError(kind="io_error", message=f"failed to list release notes directory: {directory}: {e}")
        )

    notes: LocaleNotesMap = {}
    for path in paths:
        locale = locale_from_filename(path.name)
        if locale is None:
            continue
        try:
            notes[locale] = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(PublishError(kind="io_error", message=f"failed to read release notes {path}: {e}"))

    if console is not None:
        if notes:
            console.debug("Found the following recent changes:")
            for locale, text in notes.items():
                console.debug(f"{locale}: {text}")
        else:
            console.debug("No recent changes found")

    return Ok(notes)
