"""Expansion (OBB) file config entries.

Entries look like ``main:/path/to/main.obb`` or ``patch:/path/to/patch.obb``.
"""

from __future__ import annotations

from pathlib import Path

from playdeploy.core.result import Err, Ok, Result
from playdeploy.publish.errors import PublishError
from playdeploy.publish.model import ExpansionFileSpec, ExpansionFileType

_ENTRY_HINT = "expected 'main:<path>' or 'patch:<path>'"


def parse_expansion_entry(entry: str) -> Result[ExpansionFileSpec, PublishError]:
    """Parse one ``<type>:<path>`` entry.

    The type must be exactly ``main`` or ``patch``. Everything after the
    first colon is the path, so paths may contain colons themselves.
    """
    clean = entry.strip()
    type_tag, sep, rest = clean.partition(":")
    if not sep:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"malformed expansion file entry: {entry}",
                hint=_ENTRY_HINT,
            )
        )

    try:
        file_type = ExpansionFileType(type_tag)
    except ValueError:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"invalid expansion file config: {entry}",
                hint=_ENTRY_HINT,
            )
        )

    return Ok(ExpansionFileSpec(type=file_type, path=Path(rest.strip())))
