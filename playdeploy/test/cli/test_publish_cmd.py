from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from playdeploy import __version__
from playdeploy.cli.app import app
from playdeploy.core.errors import ErrorCode
from playdeploy.core.result import Err, Ok, Result
from playdeploy.publish.client import MockPublisherClient, PublisherClient, RemoteError
from playdeploy.publish.config import PublishConfig, ReleaseConfig
from playdeploy.publish.errors import PublishError

runner = CliRunner()


def _patch_client(monkeypatch: pytest.MonkeyPatch, client: MockPublisherClient) -> list[str]:
    import playdeploy.cli.commands.publish_cmd as publish_cmd

    seen: list[str] = []

    def fake_make_client(service_account_json: str) -> Result[PublisherClient, PublishError]:
        seen.append(service_account_json)
        return Ok(client)

    monkeypatch.setattr(publish_cmd, "_make_client", fake_make_client)
    return seen


def _aab(tmp_path: Path) -> Path:
    path = tmp_path / "app.aab"
    path.write_bytes(b"aab")
    return path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_publish_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = MockPublisherClient(next_version_code=33)
    seen = _patch_client(monkeypatch, client)

    result = runner.invoke(
        app,
        [
            "publish",
            "--package-name",
            "com.example.app",
            "--service-account-json",
            "sa.json",
            "--app-path",
            str(_aab(tmp_path)),
            "--track",
            "beta",
            "--user-fraction",
            "0.5",
        ],
    )

    assert result.exit_code == 0, result.output
    assert seen == ["sa.json"]
    assert "33" in result.output
    body = client.called("update_track")[0].args["body"]
    assert body["releases"][0]["status"] == "inProgress"  # type: ignore[index]


def test_publish_reads_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = MockPublisherClient()
    _patch_client(monkeypatch, client)

    result = runner.invoke(
        app,
        ["publish", "--dry-run"],
        env={
            "PLAY_PACKAGE_NAME": "com.example.app",
            "PLAY_SERVICE_ACCOUNT_JSON": "{}",
            "PLAY_APP_PATH": str(_aab(tmp_path)),
        },
    )

    assert result.exit_code == 0, result.output
    assert client.called("validate_edit")
    assert client.called("commit_edit") == []


def test_invalid_config_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = MockPublisherClient()
    _patch_client(monkeypatch, client)

    result = runner.invoke(
        app,
        [
            "publish",
            "--package-name",
            "com.example.app",
            "--app-path",
            str(_aab(tmp_path)),
            "--status",
            "paused",
        ],
    )

    assert result.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert "invalid release status" in result.output
    assert client.calls == []


def test_remote_error_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = MockPublisherClient()
    client.fail("upload_bundle", RemoteError(status=500, message="backend error"))
    _patch_client(monkeypatch, client)

    result = runner.invoke(
        app,
        ["publish", "--package-name", "com.example.app", "--app-path", str(_aab(tmp_path))],
    )

    assert result.exit_code == int(ErrorCode.REMOTE_ERROR)
    assert "failed to upload app bundle" in result.output


def test_auth_error_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import playdeploy.cli.commands.publish_cmd as publish_cmd

    monkeypatch.setattr(
        publish_cmd,
        "_make_client",
        lambda _: Err(PublishError(kind="auth_failed", message="bad key")),
    )

    result = runner.invoke(
        app,
        ["publish", "--package-name", "com.example.app", "--app-path", str(_aab(tmp_path))],
    )

    assert result.exit_code == int(ErrorCode.AUTH_ERROR)


def test_config_file_with_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = MockPublisherClient()
    _patch_client(monkeypatch, client)
    _aab(tmp_path)
    config = tmp_path / "play.toml"
    config.write_text(
        '[publish]\npackage_name = "com.example.app"\napp_path = "app.aab"\ntrack = "alpha"\n',
        encoding="utf-8",
    )

    result = runner.invoke(app, ["publish", "--config", str(config), "--track", "production"])

    assert result.exit_code == 0, result.output
    assert client.called("update_track")[0].args["track"] == "production"


class TestMergeInputs:
    def test_untouched_without_inputs(self) -> None:
        from playdeploy.cli.commands.publish_cmd import merge_inputs

        base = PublishConfig(package_name="a.b", track="alpha")
        assert merge_inputs(base) == base

    def test_overrides(self) -> None:
        from playdeploy.cli.commands.publish_cmd import merge_inputs

        base = PublishConfig(package_name="a.b", release=ReleaseConfig(user_fraction=0.2, release_name="x"))
        merged = merge_inputs(
            base,
            app_path="one.apk|two.aab",
            status="halted",
            whatsnews_dir="",
            expansion_files="main:/m.obb|patch:/p.obb",
            mapping_file=" mapping.txt ",
        )
        assert merged.app_paths == (Path("one.apk"), Path("two.aab"))
        assert merged.release.status == "halted"
        assert merged.release.user_fraction == 0.2
        assert merged.release.release_name == "x"
        assert merged.release.whatsnews_dir is None
        assert merged.expansion_files == ("main:/m.obb", "patch:/p.obb")
        assert merged.mapping_file == Path("mapping.txt")
