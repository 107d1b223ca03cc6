from __future__ import annotations

import dataclasses
import re
from pathlib import Path

import typer

from playdeploy.cli.commands._helpers import exit_on_error
from playdeploy.cli.context import CLIContext, build_context
from playdeploy.core.result import Err, Ok, Result
from playdeploy.publish.auth import load_credentials
from playdeploy.publish.client import GooglePublisherClient, PublisherClient
from playdeploy.publish.config import (
    PublishConfig,
    load_config,
    split_list_input,
    validate_config,
)
from playdeploy.publish.errors import PublishError
from playdeploy.publish.model import PublishSummary
from playdeploy.publish.service import PublishService

_EXPANSION_SEPARATORS = re.compile(r"[|\n]")


def _make_client(service_account_json: str) -> Result[PublisherClient, PublishError]:
    credentials = load_credentials(service_account_json)
    if isinstance(credentials, Err):
        return credentials
    return Ok(GooglePublisherClient.from_credentials(credentials.value))


def _optional_path(value: str | None) -> Path | None:
    if value is None or not value.strip():
        return None
    return Path(value.strip()).expanduser()


def merge_inputs(
    base: PublishConfig,
    *,
    package_name: str | None = None,
    service_account_json: str | None = None,
    app_path: str | None = None,
    track: str | None = None,
    status: str | None = None,
    user_fraction: float | None = None,
    update_priority: int | None = None,
    release_name: str | None = None,
    whatsnews_dir: str | None = None,
    expansion_files: str | None = None,
    mapping_file: str | None = None,
    ack_bundle_installation_warning: bool | None = None,
    changes_not_sent_for_review: bool | None = None,
    dry_run: bool | None = None,
) -> PublishConfig:
    """Overlay explicitly given CLI/env inputs on a base config."""
    release = base.release
    release_changes: dict[str, object] = {}
    if status is not None:
        release_changes["status"] = status.strip()
    if user_fraction is not None:
        release_changes["user_fraction"] = user_fraction
    if update_priority is not None:
        release_changes["update_priority"] = update_priority
    if release_name is not None:
        release_changes["release_name"] = release_name.strip()
    if whatsnews_dir is not None:
        release_changes["whatsnews_dir"] = _optional_path(whatsnews_dir)
    if release_changes:
        release = dataclasses.replace(release, **release_changes)

    changes: dict[str, object] = {"release": release}
    if package_name is not None:
        changes["package_name"] = package_name.strip()
    if service_account_json is not None:
        changes["service_account_json"] = service_account_json
    if app_path is not None:
        changes["app_paths"] = tuple(Path(p).expanduser() for p in split_list_input(app_path))
    if track is not None:
        changes["track"] = track.strip()
    if expansion_files is not None:
        changes["expansion_files"] = tuple(split_list_input(expansion_files, separators=_EXPANSION_SEPARATORS))
    if mapping_file is not None:
        changes["mapping_file"] = _optional_path(mapping_file)
    if ack_bundle_installation_warning is not None:
        changes["ack_bundle_installation_warning"] = ack_bundle_installation_warning
    if changes_not_sent_for_review is not None:
        changes["changes_not_sent_for_review"] = changes_not_sent_for_review
    if dry_run is not None:
        changes["dry_run"] = dry_run
    return dataclasses.replace(base, **changes)


def _print_summary(ctx: CLIContext, summary: PublishSummary) -> None:
    codes = ", ".join(str(code) for code in summary.version_codes)
    if summary.committed:
        ctx.console.success(f"Published version codes {codes} to track '{summary.track}' ({summary.status})")
        ctx.console.print(f"Committed edit: {summary.edit_id}")
    else:
        ctx.console.success(f"Dry run: edit for version codes {codes} on track '{summary.track}' is valid")


def publish(
    config_file: Path | None = typer.Option(
        None, "--config", envvar="PLAY_CONFIG", help="TOML file with a [publish] table"
    ),
    package_name: str | None = typer.Option(
        None, "--package-name", envvar="PLAY_PACKAGE_NAME", help="Application id, e.g. com.example.app"
    ),
    service_account_json: str | None = typer.Option(
        None,
        "--service-account-json",
        envvar="PLAY_SERVICE_ACCOUNT_JSON",
        help="Service account key file path or its JSON content",
        show_default=False,
    ),
    app_path: str | None = typer.Option(
        None,
        "--app-path",
        envvar="PLAY_APP_PATH",
        help="APK/AAB path(s), separated by '|', ',' or newlines",
    ),
    track: str | None = typer.Option(
        None, "--track", envvar="PLAY_TRACK", help="internal, alpha, beta, production or a custom track"
    ),
    status: str | None = typer.Option(
        None, "--status", envvar="PLAY_STATUS", help="completed|inProgress|draft|halted (derived when empty)"
    ),
    user_fraction: float | None = typer.Option(
        None, "--user-fraction", envvar="PLAY_USER_FRACTION", help="Staged rollout fraction (0..1)"
    ),
    update_priority: int | None = typer.Option(
        None, "--update-priority", envvar="PLAY_UPDATE_PRIORITY", help="In-app update priority (0..5)"
    ),
    release_name: str | None = typer.Option(
        None, "--release-name", envvar="PLAY_RELEASE_NAME", help="Release name shown in the Play Console"
    ),
    whatsnews_dir: str | None = typer.Option(
        None, "--whatsnews-dir", envvar="PLAY_WHATSNEWS_DIR", help="Directory of whatsnew-<locale> files"
    ),
    expansion_files: str | None = typer.Option(
        None,
        "--expansion-files",
        envvar="PLAY_EXPANSION_FILES",
        help="'main:<path>' / 'patch:<path>' entries separated by '|'",
    ),
    mapping_file: str | None = typer.Option(
        None, "--mapping-file", envvar="PLAY_MAPPING_FILE", help="ProGuard mapping.txt to attach"
    ),
    ack_bundle_installation_warning: bool | None = typer.Option(
        None,
        "--ack-bundle-installation-warning/--no-ack-bundle-installation-warning",
        envvar="PLAY_ACK_BUNDLE_INSTALLATION_WARNING",
        help="Acknowledge the app bundle size warning",
    ),
    changes_not_sent_for_review: bool | None = typer.Option(
        None,
        "--changes-not-sent-for-review/--send-changes-for-review",
        envvar="PLAY_CHANGES_NOT_SENT_FOR_REVIEW",
        help="Commit without sending the changes for review",
    ),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", envvar="PLAY_DRY_RUN", help="Validate the edit instead of committing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", envvar="PLAY_VERBOSE", help="Print debug output"),
) -> None:
    """Upload APK/AAB files and release them on a Google Play track."""
    ctx = build_context(verbose=verbose)

    base = PublishConfig()
    if config_file is not None:
        loaded = load_config(config_file)
        exit_on_error(loaded, ctx)
        if isinstance(loaded, Ok):
            base = loaded.value

    config = merge_inputs(
        base,
        package_name=package_name,
        service_account_json=service_account_json,
        app_path=app_path,
        track=track,
        status=status,
        user_fraction=user_fraction,
        update_priority=update_priority,
        release_name=release_name,
        whatsnews_dir=whatsnews_dir,
        expansion_files=expansion_files,
        mapping_file=mapping_file,
        ack_bundle_installation_warning=ack_bundle_installation_warning,
        changes_not_sent_for_review=changes_not_sent_for_review,
        dry_run=dry_run,
    )
    validated = validate_config(config)
    exit_on_error(validated, ctx)

    client = _make_client(config.service_account_json)
    exit_on_error(client, ctx)
    if not isinstance(client, Ok):
        return

    ctx.console.header(f"Publishing {config.package_name} to '{config.track}'")
    result = PublishService(client=client.value, config=config, console=ctx.console).publish()
    exit_on_error(result, ctx)
    if isinstance(result, Ok):
        _print_summary(ctx, result.value)
