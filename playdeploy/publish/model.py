from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

LocaleNotesMap = dict[str, str]


class ReleaseStatus(StrEnum):
    COMPLETED = "completed"
    IN_PROGRESS = "inProgress"
    DRAFT = "draft"
    HALTED = "halted"

    @property
    def accepts_user_fraction(self) -> bool:
        """Only staged rollouts carry a user fraction."""
        return self in (ReleaseStatus.IN_PROGRESS, ReleaseStatus.HALTED)


class ExpansionFileType(StrEnum):
    MAIN = "main"
    PATCH = "patch"


class ArtifactKind(StrEnum):
    APK = "apk"
    AAB = "aab"

    @classmethod
    def from_path(cls, path: Path) -> ArtifactKind | None:
        suffix = path.suffix.lower()
        if suffix == ".apk":
            return cls.APK
        if suffix == ".aab":
            return cls.AAB
        return None


@dataclass(frozen=True, slots=True)
class ExpansionFileSpec:
    type: ExpansionFileType
    path: Path


@dataclass(frozen=True, slots=True)
class UploadResult:
    version_code: int
    kind: ArtifactKind


@dataclass(frozen=True, slots=True)
class LocalizedText:
    language: str
    text: str

    def to_api(self) -> dict[str, str]:
        return {"language": self.language, "text": self.text}


@dataclass(frozen=True, slots=True)
class ReleaseDescriptor:
    """One track release, built once per publish run."""

    version_codes: tuple[int, ...]
    status: ReleaseStatus
    in_app_update_priority: int = 0
    user_fraction: float | None = None
    name: str | None = None
    release_notes: tuple[LocalizedText, ...] = ()

    def to_api(self) -> dict[str, object]:
        """Render the ``TrackRelease`` body of the androidpublisher v3 API."""
        body: dict[str, object] = {
            # int64 fields travel as strings in the JSON API
            "versionCodes": [str(code) for code in self.version_codes],
            "status": str(self.status),
            "inAppUpdatePriority": self.in_app_update_priority,
        }
        if self.user_fraction is not None:
            body["userFraction"] = self.user_fraction
        if self.name:
            body["name"] = self.name
        if self.release_notes:
            body["releaseNotes"] = [note.to_api() for note in self.release_notes]
        return body


@dataclass(frozen=True, slots=True)
class PublishSummary:
    edit_id: str
    track: str
    version_codes: tuple[int, ...]
    status: ReleaseStatus
    committed: bool
