from __future__ import annotations

from pathlib import Path

import pytest

from playdeploy.core.result import Err, Ok
from playdeploy.output.console import MockConsole
from playdeploy.publish.config import ReleaseConfig
from playdeploy.publish.model import LocalizedText, ReleaseStatus
from playdeploy.publish.release import (
    build_release,
    resolve_status,
    resolve_user_fraction,
    should_apply_user_fraction,
)


class TestResolveStatus:
    def test_empty_status_without_fraction_is_completed(self) -> None:
        assert resolve_status("", 0) is ReleaseStatus.COMPLETED

    def test_empty_status_with_fraction_is_in_progress(self) -> None:
        assert resolve_status("", 0.3) is ReleaseStatus.IN_PROGRESS

    @pytest.mark.parametrize("status", ["completed", "inProgress", "draft", "halted"])
    def test_explicit_status_wins(self, status: str) -> None:
        assert resolve_status(status, 0.5) == status

    def test_unknown_status_raises(self) -> None:
        with pytest.raises(ValueError):
            resolve_status("paused", 0)


class TestUserFraction:
    @pytest.mark.parametrize(
        ("status", "applies"),
        [
            (ReleaseStatus.COMPLETED, False),
            (ReleaseStatus.DRAFT, False),
            (ReleaseStatus.IN_PROGRESS, True),
            (ReleaseStatus.HALTED, True),
        ],
    )
    def test_should_apply(self, status: ReleaseStatus, applies: bool) -> None:
        assert should_apply_user_fraction(status) is applies

    def test_dropped_for_draft(self) -> None:
        assert resolve_user_fraction(ReleaseStatus.DRAFT, 0.3) is None

    def test_kept_for_halted(self) -> None:
        assert resolve_user_fraction(ReleaseStatus.HALTED, 0.2) == 0.2

    def test_zero_is_never_sent(self) -> None:
        assert resolve_user_fraction(ReleaseStatus.IN_PROGRESS, 0) is None


class TestBuildRelease:
    def test_completed_without_fraction(self) -> None:
        built = build_release(ReleaseConfig(), [10])
        assert isinstance(built, Ok)
        assert built.value.status is ReleaseStatus.COMPLETED
        assert built.value.user_fraction is None
        assert built.value.version_codes == (10,)

    def test_staged_rollout(self) -> None:
        built = build_release(ReleaseConfig(user_fraction=0.3), [10, 11])
        assert isinstance(built, Ok)
        assert built.value.status is ReleaseStatus.IN_PROGRESS
        assert built.value.user_fraction == 0.3

    def test_draft_silently_drops_fraction(self) -> None:
        console = MockConsole()
        built = build_release(ReleaseConfig(status="draft", user_fraction=0.3), [10], console=console)
        assert isinstance(built, Ok)
        assert built.value.status is ReleaseStatus.DRAFT
        assert built.value.user_fraction is None
        assert not console.has_error()
        assert not console.has_warning()

    def test_halted_keeps_fraction(self) -> None:
        built = build_release(ReleaseConfig(status="halted", user_fraction=0.7), [10])
        assert isinstance(built, Ok)
        assert built.value.status is ReleaseStatus.HALTED
        assert built.value.user_fraction == 0.7

    def test_name_and_priority(self) -> None:
        built = build_release(ReleaseConfig(release_name="1.2.3", update_priority=4), [10])
        assert isinstance(built, Ok)
        assert built.value.name == "1.2.3"
        assert built.value.in_app_update_priority == 4

    def test_empty_name_is_omitted(self) -> None:
        built = build_release(ReleaseConfig(release_name=""), [10])
        assert isinstance(built, Ok)
        assert built.value.name is None

    def test_duplicate_version_codes_keep_first_order(self) -> None:
        built = build_release(ReleaseConfig(), [12, 10, 12])
        assert isinstance(built, Ok)
        assert built.value.version_codes == (12, 10)

    def test_no_version_codes_fails(self) -> None:
        built = build_release(ReleaseConfig(), [])
        assert isinstance(built, Err)
        assert built.error.kind == "build_failure"

    def test_invalid_status_fails(self) -> None:
        built = build_release(ReleaseConfig(status="paused"), [10])
        assert isinstance(built, Err)
        assert built.error.kind == "invalid_config"

    def test_release_notes_attached(self, tmp_path: Path) -> None:
        (tmp_path / "whatsnew-en-US").write_text("Fixes", encoding="utf-8")
        (tmp_path / "whatsnew-fr").write_text("Corrections", encoding="utf-8")

        built = build_release(ReleaseConfig(whatsnews_dir=tmp_path), [10])
        assert isinstance(built, Ok)
        assert set(built.value.release_notes) == {
            LocalizedText(language="en-US", text="Fixes"),
            LocalizedText(language="fr", text="Corrections"),
        }

    def test_release_notes_skipped_without_dir(self) -> None:
        built = build_release(ReleaseConfig(whatsnews_dir=None), [10])
        assert isinstance(built, Ok)
        assert built.value.release_notes == ()

    def test_release_notes_read_error_is_build_failure(self, tmp_path: Path) -> None:
        built = build_release(ReleaseConfig(whatsnews_dir=tmp_path / "missing"), [10])
        assert isinstance(built, Err)
        assert built.error.kind == "build_failure"
        assert built.error.message.startswith("failed to update listing")
        assert "missing" in built.error.message


class TestReleaseDescriptorBody:
    def test_to_api_omits_absent_fields(self) -> None:
        built = build_release(ReleaseConfig(), [10, 11])
        assert isinstance(built, Ok)
        assert built.value.to_api() == {
            "versionCodes": ["10", "11"],
            "status": "completed",
            "inAppUpdatePriority": 0,
        }

    def test_to_api_full(self, tmp_path: Path) -> None:
        (tmp_path / "whatsnew-en-US").write_text("Fixes", encoding="utf-8")
        config = ReleaseConfig(
            status="inProgress",
            user_fraction=0.25,
            update_priority=2,
            release_name="v2",
            whatsnews_dir=tmp_path,
        )
        built = build_release(config, [20])
        assert isinstance(built, Ok)
        assert built.value.to_api() == {
            "versionCodes": ["20"],
            "status": "inProgress",
            "inAppUpdatePriority": 2,
            "userFraction": 0.25,
            "name": "v2",
            "releaseNotes": [{"language": "en-US", "text": "Fixes"}],
        }
