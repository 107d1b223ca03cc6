"""Google Play publishing client abstraction.

This module provides:
- PublisherClient: Protocol for the edit-session calls (injectable for tests)
- GooglePublisherClient: Real implementation using google-api-python-client
- MockPublisherClient: In-memory implementation for testing
- RemoteError: what the service answered when a call failed

Every upload takes an already-open binary handle; opening and closing the
file is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable

from playdeploy.core.result import Err, Ok, Result
from playdeploy.core.structured import StrDict, as_str_dict

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

__all__ = [
    "APK_MIME_TYPE",
    "OCTET_STREAM",
    "GooglePublisherClient",
    "MockPublisherClient",
    "PublisherClient",
    "RemoteError",
]

APK_MIME_TYPE = "application/vnd.android.package-archive"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class RemoteError:
    """A failed publishing API call.

    Attributes:
        status: HTTP status code (0 when no response was received)
        message: Reason reported by the service or the transport
    """

    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"Error {self.status}: {self.message}"
        return self.message


@runtime_checkable
class PublisherClient(Protocol):
    """Edit-session operations of the androidpublisher v3 API."""

    def insert_edit(self, package_name: str) -> Result[str, RemoteError]:
        """Open an edit session and return its id."""
        ...

    def upload_bundle(
        self,
        package_name: str,
        edit_id: str,
        media: BinaryIO,
        *,
        ack_bundle_installation_warning: bool = False,
    ) -> Result[StrDict, RemoteError]:
        """Upload an .aab; the response carries ``versionCode``."""
        ...

    def upload_apk(self, package_name: str, edit_id: str, media: BinaryIO) -> Result[StrDict, RemoteError]:
        """Upload an .apk; the response carries ``versionCode``."""
        ...

    def upload_expansion_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        expansion_file_type: str,
        media: BinaryIO,
    ) -> Result[StrDict, RemoteError]: ...

    def upload_deobfuscation_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        deobfuscation_file_type: str,
        media: BinaryIO,
    ) -> Result[StrDict, RemoteError]: ...

    def update_track(
        self,
        package_name: str,
        edit_id: str,
        track: str,
        body: dict[str, object],
    ) -> Result[StrDict, RemoteError]: ...

    def validate_edit(self, package_name: str, edit_id: str) -> Result[None, RemoteError]: ...

    def commit_edit(
        self,
        package_name: str,
        edit_id: str,
        *,
        changes_not_sent_for_review: bool = False,
    ) -> Result[str, RemoteError]:
        """Commit the edit and return the committed edit id."""
        ...

    def delete_edit(self, package_name: str, edit_id: str) -> Result[None, RemoteError]: ...


def _remote_error(e: Exception) -> RemoteError:
    from googleapiclient.errors import HttpError

    if isinstance(e, HttpError):
        return RemoteError(status=int(e.resp.status), message=str(e.reason))
    return RemoteError(status=0, message=str(e))


class GooglePublisherClient:
    """Real client over the ``androidpublisher`` v3 discovery service.

    Uploads are resumable and sent in chunks; the library owns timeouts.
    """

    def __init__(self, service: Any) -> None:
        self._service = service

    @classmethod
    def from_credentials(cls, credentials: Credentials) -> GooglePublisherClient:
        from googleapiclient.discovery import build

        service = build("androidpublisher", "v3", credentials=credentials, cache_discovery=False)
        return cls(service)

    def _execute(self, request: Any) -> Result[StrDict, RemoteError]:
        from google.auth.exceptions import GoogleAuthError
        from googleapiclient.errors import Error as GoogleApiError

        try:
            response: object = request.execute()
        except (GoogleApiError, GoogleAuthError, OSError) as e:
            return Err(_remote_error(e))
        return Ok(as_str_dict(response) or {})

    def _upload(self, request: Any) -> Result[StrDict, RemoteError]:
        from google.auth.exceptions import GoogleAuthError
        from googleapiclient.errors import Error as GoogleApiError

        try:
            response: object = None
            while response is None:
                _, response = request.next_chunk()
        except (GoogleApiError, GoogleAuthError, OSError) as e:
            return Err(_remote_error(e))
        return Ok(as_str_dict(response) or {})

    @staticmethod
    def _media(media: BinaryIO, mimetype: str) -> Any:
        from googleapiclient.http import MediaIoBaseUpload

        return MediaIoBaseUpload(media, mimetype=mimetype, resumable=True)

    def insert_edit(self, package_name: str) -> Result[str, RemoteError]:
        result = self._execute(self._service.edits().insert(packageName=package_name, body={}))
        if isinstance(result, Err):
            return result
        edit_id = result.value.get("id")
        if not isinstance(edit_id, str) or not edit_id:
            return Err(RemoteError(status=0, message="edit response has no id"))
        return Ok(edit_id)

    def upload_bundle(
        self,
        package_name: str,
        edit_id: str,
        media: BinaryIO,
        *,
        ack_bundle_installation_warning: bool = False,
    ) -> Result[StrDict, RemoteError]:
        request = (
            self._service.edits()
            .bundles()
            .upload(
                packageName=package_name,
                editId=edit_id,
                ackBundleInstallationWarning=ack_bundle_installation_warning,
                media_body=self._media(media, OCTET_STREAM),
            )
        )
        return self._upload(request)

    def upload_apk(self, package_name: str, edit_id: str, media: BinaryIO) -> Result[StrDict, RemoteError]:
        request = (
            self._service.edits()
            .apks()
            .upload(
                packageName=package_name,
                editId=edit_id,
                media_body=self._media(media, APK_MIME_TYPE),
            )
        )
        return self._upload(request)

    def upload_expansion_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        expansion_file_type: str,
        media: BinaryIO,
    ) -> Result[StrDict, RemoteError]:
        request = (
            self._service.edits()
            .expansionfiles()
            .upload(
                packageName=package_name,
                editId=edit_id,
                apkVersionCode=version_code,
                expansionFileType=expansion_file_type,
                media_body=self._media(media, OCTET_STREAM),
            )
        )
        return self._upload(request)

    def upload_deobfuscation_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        deobfuscation_file_type: str,
        media: BinaryIO,
    ) -> Result[StrDict, RemoteError]:
        request = (
            self._service.edits()
            .deobfuscationfiles()
            .upload(
                packageName=package_name,
                editId=edit_id,
                apkVersionCode=version_code,
                deobfuscationFileType=deobfuscation_file_type,
                media_body=self._media(media, OCTET_STREAM),
            )
        )
        return self._upload(request)

    def update_track(
        self,
        package_name: str,
        edit_id: str,
        track: str,
        body: dict[str, object],
    ) -> Result[StrDict, RemoteError]:
        request = (
            self._service.edits()
            .tracks()
            .update(packageName=package_name, editId=edit_id, track=track, body=body)
        )
        return self._execute(request)

    def validate_edit(self, package_name: str, edit_id: str) -> Result[None, RemoteError]:
        result = self._execute(self._service.edits().validate(packageName=package_name, editId=edit_id))
        if isinstance(result, Err):
            return result
        return Ok(None)

    def commit_edit(
        self,
        package_name: str,
        edit_id: str,
        *,
        changes_not_sent_for_review: bool = False,
    ) -> Result[str, RemoteError]:
        kwargs: dict[str, object] = {"packageName": package_name, "editId": edit_id}
        if changes_not_sent_for_review:
            kwargs["changesNotSentForReview"] = True
        result = self._execute(self._service.edits().commit(**kwargs))
        if isinstance(result, Err):
            return result
        committed = result.value.get("id")
        return Ok(committed if isinstance(committed, str) and committed else edit_id)

    def delete_edit(self, package_name: str, edit_id: str) -> Result[None, RemoteError]:
        result = self._execute(self._service.edits().delete(packageName=package_name, editId=edit_id))
        if isinstance(result, Err):
            return result
        return Ok(None)


@dataclass(frozen=True, slots=True)
class MockCall:
    """One recorded MockPublisherClient call."""

    method: str
    args: dict[str, object]
    content: bytes | None = None


def _empty_calls() -> list[MockCall]:
    return []


def _empty_failures() -> dict[str, RemoteError]:
    return {}


@dataclass
class MockPublisherClient:
    """In-memory publisher for tests.

    Uploads are assigned increasing version codes starting at
    ``next_version_code``. Use ``fail(method, error)`` to make a method
    return ``Err(error)``.

    Usage:
        client = MockPublisherClient()
        client.fail("upload_bundle", RemoteError(403, "nope"))
    """

    next_version_code: int = 100
    edit_id: str = "edit-1"
    calls: list[MockCall] = field(default_factory=_empty_calls)
    failures: dict[str, RemoteError] = field(default_factory=_empty_failures)

    def fail(self, method: str, error: RemoteError) -> None:
        self.failures[method] = error

    def called(self, method: str) -> list[MockCall]:
        return [c for c in self.calls if c.method == method]

    def _record(self, method: str, media: BinaryIO | None = None, **args: object) -> RemoteError | None:
        content = media.read() if media is not None else None
        self.calls.append(MockCall(method=method, args=args, content=content))
        return self.failures.get(method)

    def _artifact(self, method: str, media: BinaryIO, **args: object) -> Result[StrDict, RemoteError]:
        error = self._record(method, media, **args)
        if error is not None:
            return Err(error)
        version_code = self.next_version_code
        self.next_version_code += 1
        return Ok({"versionCode": version_code})

    def insert_edit(self, package_name: str) -> Result[str, RemoteError]:
        error = self._record("insert_edit", package_name=package_name)
        if error is not None:
            return Err(error)
        return Ok(self.edit_id)

    def upload_bundle(
        self,
        package_name: str,
        edit_id: str,
        media: BinaryIO,
        *,
        ack_bundle_installation_warning: bool = False,
    ) -> Result[StrDict, RemoteError]:
        return self._artifact(
            "upload_bundle",
            media,
            package_name=package_name,
            edit_id=edit_id,
            ack_bundle_installation_warning=ack_bundle_installation_warning,
        )

    def upload_apk(self, package_name: str, edit_id: str, media: BinaryIO) -> Result[StrDict, RemoteError]:
        return self._artifact("upload_apk", media, package_name=package_name, edit_id=edit_id)

    def upload_expansion_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        expansion_file_type: str,
        media: BinaryIO,
    ) -> Result[StrDict, RemoteError]:
        error = self._record(
            "upload_expansion_file",
            media,
            package_name=package_name,
            edit_id=edit_id,
            version_code=version_code,
            expansion_file_type=expansion_file_type,
        )
        if error is not None:
            return Err(error)
        return Ok({})

    def upload_deobfuscation_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        deobfuscation_file_type: str,
        media: BinaryIO,
    ) -> Result[StrDict, RemoteError]:
        error = self._record(
            "upload_deobfuscation_file",
            media,
            package_name=package_name,
            edit_id=edit_id,
            version_code=version_code,
            deobfuscation_file_type=deobfuscation_file_type,
        )
        if error is not None:
            return Err(error)
        return Ok({})

    def update_track(
        self,
        package_name: str,
        edit_id: str,
        track: str,
        body: dict[str, object],
    ) -> Result[StrDict, RemoteError]:
        error = self._record("update_track", package_name=package_name, edit_id=edit_id, track=track, body=body)
        if error is not None:
            return Err(error)
        return Ok(dict(body))

    def validate_edit(self, package_name: str, edit_id: str) -> Result[None, RemoteError]:
        error = self._record("validate_edit", package_name=package_name, edit_id=edit_id)
        if error is not None:
            return Err(error)
        return Ok(None)

    def commit_edit(
        self,
        package_name: str,
        edit_id: str,
        *,
        changes_not_sent_for_review: bool = False,
    ) -> Result[str, RemoteError]:
        error = self._record(
            "commit_edit",
            package_name=package_name,
            edit_id=edit_id,
            changes_not_sent_for_review=changes_not_sent_for_review,
        )
        if error is not None:
            return Err(error)
        return Ok(edit_id)

    def delete_edit(self, package_name: str, edit_id: str) -> Result[None, RemoteError]:
        error = self._record("delete_edit", package_name=package_name, edit_id=edit_id)
        if error is not None:
            return Err(error)
        return Ok(None)
