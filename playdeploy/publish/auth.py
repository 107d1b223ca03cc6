"""Service account credentials for the publishing API."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from playdeploy.core.result import Err, Ok, Result
from playdeploy.core.structured import as_str_dict
from playdeploy.publish.errors import PublishError

if TYPE_CHECKING:
    from google.oauth2.service_account import Credentials

ANDROIDPUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"


def _service_account_info(value: str) -> Result[dict[str, object], PublishError]:
    """Accepts a path to a JSON key file or the raw JSON text."""
    raw = value.strip()
    if not raw:
        return Err(
            PublishError(
                kind="auth_failed",
                message="service account JSON is required",
                hint="pass a key file path or its content with --service-account-json",
            )
        )

    if not raw.startswith("{"):
        path = Path(raw).expanduser()
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(PublishError(kind="auth_failed", message=f"failed to read service account file {path}: {e}"))

    try:
        data_obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(PublishError(kind="auth_failed", message=f"service account JSON is not valid JSON: {e}"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(PublishError(kind="auth_failed", message="service account JSON must be an object"))
    return Ok(data)


def load_credentials(value: str) -> Result[Credentials, PublishError]:
    """Build scoped service account credentials from a key file path or JSON text."""
    from google.oauth2.service_account import Credentials

    info = _service_account_info(value)
    if isinstance(info, Err):
        return info

    try:
        credentials = Credentials.from_service_account_info(info.value, scopes=[ANDROIDPUBLISHER_SCOPE])
    except (ValueError, KeyError) as e:
        return Err(
            PublishError(
                kind="auth_failed",
                message=f"invalid service account credentials: {e}",
                hint="expected a service account key with client_email and private_key",
            )
        )
    return Ok(credentials)
