"""Artifact and auxiliary file uploads into an edit session.

Each function opens its file right before the call and closes it when the
call returns. Nothing is retried; the caller decides whether a failure
aborts the publish.
"""

from __future__ import annotations

from pathlib import Path

from playdeploy.core.result import Err, Ok, Result
from playdeploy.core.structured import get_int
from playdeploy.output.console import ConsoleProtocol
from playdeploy.publish.client import PublisherClient, RemoteError
from playdeploy.publish.errors import PublishError
from playdeploy.publish.expansion import parse_expansion_entry
from playdeploy.publish.model import ArtifactKind, UploadResult

BUNDLE_INSTALLATION_WARNING = (
    "Error 403: The installation of the app bundle may be too large "
    "and trigger user warning on some devices, and this needs to be explicitly acknowledged in the request."
)
BUNDLE_INSTALLATION_WARNING_HINT = (
    "To acknowledge this warning, set the Acknowledge Bundle Installation Warning "
    "(ack_bundle_installation_warning) input to true."
)

DEOBFUSCATION_FILE_TYPE = "proguard"


def _open_error(what: str, path: Path, e: OSError) -> PublishError:
    return PublishError(kind="io_error", message=f"failed to read {what} ({path}), error: {e}")


def _version_code(response: dict[str, object], what: str) -> Result[int, PublishError]:
    version_code = get_int(response, "versionCode")
    if version_code is None:
        return Err(PublishError(kind="remote_rejected", message=f"{what} response has no versionCode"))
    return Ok(version_code)


def bundle_upload_error(error: RemoteError) -> PublishError:
    """Turn a rejected bundle upload into an error, with a fix for the size warning."""
    message = f"failed to upload app bundle, error: {error}"
    if BUNDLE_INSTALLATION_WARNING in str(error):
        message = f"{message}\n{BUNDLE_INSTALLATION_WARNING_HINT}"
    return PublishError(kind="remote_rejected", message=message)


def upload_bundle(
    client: PublisherClient,
    *,
    package_name: str,
    edit_id: str,
    path: Path,
    ack_installation_warning: bool = False,
    console: ConsoleProtocol | None = None,
) -> Result[UploadResult, PublishError]:
    if console is not None:
        console.debug(f"Uploading file {path} with package name '{package_name}', AppEditId '{edit_id}'")
    try:
        with path.open("rb") as handle:
            result = client.upload_bundle(
                package_name,
                edit_id,
                handle,
                ack_bundle_installation_warning=ack_installation_warning,
            )
    except OSError as e:
        return Err(_open_error("app bundle", path, e))

    if isinstance(result, Err):
        return Err(bundle_upload_error(result.error))

    version_code = _version_code(result.value, "app bundle upload")
    if isinstance(version_code, Err):
        return version_code
    if console is not None:
        console.info(f"Uploaded app bundle version: {version_code.value}")
    return Ok(UploadResult(version_code=version_code.value, kind=ArtifactKind.AAB))


def upload_apk(
    client: PublisherClient,
    *,
    package_name: str,
    edit_id: str,
    path: Path,
    console: ConsoleProtocol | None = None,
) -> Result[UploadResult, PublishError]:
    if console is not None:
        console.debug(f"Uploading file {path} with package name '{package_name}', AppEditId '{edit_id}'")
    try:
        with path.open("rb") as handle:
            result = client.upload_apk(package_name, edit_id, handle)
    except OSError as e:
        return Err(_open_error("apk", path, e))

    if isinstance(result, Err):
        return Err(PublishError(kind="remote_rejected", message=f"failed to upload apk, error: {result.error}"))

    version_code = _version_code(result.value, "apk upload")
    if isinstance(version_code, Err):
        return version_code
    if console is not None:
        console.info(f"Uploaded apk version: {version_code.value}")
    return Ok(UploadResult(version_code=version_code.value, kind=ArtifactKind.APK))


def upload_expansion_file(
    client: PublisherClient,
    entry: str,
    *,
    package_name: str,
    edit_id: str,
    version_code: int,
    console: ConsoleProtocol | None = None,
) -> Result[None, PublishError]:
    """Upload the OBB named by a ``main:<path>``/``patch:<path>`` entry.

    The entry is validated before the file is touched.
    """
    spec = parse_expansion_entry(entry)
    if isinstance(spec, Err):
        return spec

    expansion = spec.value
    if console is not None:
        console.debug(f"Expansion file type is {expansion.type}, path is {expansion.path}")
        console.debug(
            f"Uploading expansion file {expansion.path} with package name '{package_name}', "
            f"AppEditId '{edit_id}', version code '{version_code}'"
        )
    try:
        with expansion.path.open("rb") as handle:
            result = client.upload_expansion_file(
                package_name,
                edit_id,
                version_code,
                str(expansion.type),
                handle,
            )
    except OSError as e:
        return Err(_open_error("expansion file", expansion.path, e))

    if isinstance(result, Err):
        return Err(
            PublishError(
                kind="remote_rejected",
                message=f"failed to upload expansion file {expansion.path}, error: {result.error}",
            )
        )
    if console is not None:
        console.info(f"Uploaded expansion file {expansion.path}")
    return Ok(None)


def upload_mapping_file(
    client: PublisherClient,
    *,
    edit_id: str,
    version_code: int,
    package_name: str,
    path: Path,
    console: ConsoleProtocol | None = None,
) -> Result[None, PublishError]:
    """Upload a ProGuard mapping file for ``version_code``."""
    if console is not None:
        console.debug(
            f"Uploading mapping file {path} with package name '{package_name}', "
            f"AppEditId '{edit_id}', version code '{version_code}'"
        )
    try:
        with path.open("rb") as handle:
            result = client.upload_deobfuscation_file(
                package_name,
                edit_id,
                version_code,
                DEOBFUSCATION_FILE_TYPE,
                handle,
            )
    except OSError as e:
        return Err(_open_error("mapping file", path, e))

    if isinstance(result, Err):
        return Err(
            PublishError(kind="remote_rejected", message=f"failed to upload mapping file, error: {result.error}")
        )
    if console is not None:
        console.info(f"Uploaded mapping file for apk version: {version_code}")
    return Ok(None)
