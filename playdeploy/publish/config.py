"""Typed publish configuration.

Settings come from a TOML file (``[publish]`` and ``[publish.release]``
tables) and/or CLI options backed by environment variables. Both paths end in
the same frozen dataclasses, checked by :func:`validate_config`.

Example::

    [publish]
    package_name = "com.example.app"
    service_account_json = "play-sa.json"
    app_paths = ["app/build/outputs/bundle/release/app-release.aab"]
    track = "beta"
    mapping_file = "app/build/outputs/mapping/release/mapping.txt"

    [publish.release]
    user_fraction = 0.1
    whatsnews_dir = "distribution/whatsnew"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from playdeploy.core.result import Err, Ok, Result
from playdeploy.core.structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_str,
    get_str_list,
    get_table,
)
from playdeploy.publish.errors import PublishError
from playdeploy.publish.model import ReleaseStatus

__all__ = [
    "DEFAULT_TRACK",
    "MAX_UPDATE_PRIORITY",
    "PublishConfig",
    "ReleaseConfig",
    "load_config",
    "split_list_input",
    "validate_config",
]

DEFAULT_TRACK = "internal"
MAX_UPDATE_PRIORITY = 5

_LIST_SEPARATORS = re.compile(r"[|,\n]")


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Inputs that shape the track release.

    An empty ``status`` means "derive it from ``user_fraction``".
    """

    status: str = ""
    user_fraction: float = 0.0
    update_priority: int = 0
    release_name: str = ""
    whatsnews_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class PublishConfig:
    package_name: str = ""
    service_account_json: str = ""
    app_paths: tuple[Path, ...] = ()
    track: str = DEFAULT_TRACK
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    expansion_files: tuple[str, ...] = ()
    mapping_file: Path | None = None
    ack_bundle_installation_warning: bool = False
    changes_not_sent_for_review: bool = False
    dry_run: bool = False

    @classmethod
    def from_dict(cls, data: StrDict, *, base_dir: Path | None = None) -> PublishConfig:
        """Create a config from the parsed ``[publish]`` table.

        Relative paths are resolved against ``base_dir`` (the config file's
        directory) when given.
        """
        release: StrDict = get_table(data, "release") or {}

        def _path(value: str | None) -> Path | None:
            if value is None:
                return None
            p = Path(value).expanduser()
            if base_dir is not None and not p.is_absolute():
                p = base_dir / p
            return p

        app_paths = [p for p in (_path(s) for s in get_str_list(data, "app_paths") or []) if p]
        single_app = _path(get_str(data, "app_path"))
        if single_app is not None:
            app_paths.append(single_app)

        return cls(
            package_name=get_str(data, "package_name") or "",
            service_account_json=get_str(data, "service_account_json") or "",
            app_paths=tuple(app_paths),
            track=get_str(data, "track") or DEFAULT_TRACK,
            release=ReleaseConfig(
                status=get_str(release, "status") or "",
                user_fraction=get_float(release, "user_fraction") or 0.0,
                update_priority=get_int(release, "update_priority") or 0,
                release_name=get_str(release, "release_name") or "",
                whatsnews_dir=_path(get_str(release, "whatsnews_dir")),
            ),
            expansion_files=tuple(get_str_list(data, "expansion_files") or ()),
            mapping_file=_path(get_str(data, "mapping_file")),
            ack_bundle_installation_warning=bool(get_bool(data, "ack_bundle_installation_warning")),
            changes_not_sent_for_review=bool(get_bool(data, "changes_not_sent_for_review")),
            dry_run=bool(get_bool(data, "dry_run")),
        )


def split_list_input(value: str | None, *, separators: re.Pattern[str] = _LIST_SEPARATORS) -> list[str]:
    """Split a CI list input (``a.aab|b.aab``, ``a,b`` or one per line)."""
    if not value:
        return []
    return [part.strip() for part in separators.split(value) if part.strip()]


def _parse_toml(path: Path) -> Result[StrDict, PublishError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError:
        return Err(PublishError(kind="invalid_config", message=f"config file not found: {path}"))
    except PermissionError:
        return Err(PublishError(kind="invalid_config", message=f"permission denied reading: {path}"))
    except tomllib.TOMLDecodeError as e:
        return Err(PublishError(kind="invalid_config", message=f"invalid TOML syntax in {path}: {e}"))
    except UnicodeDecodeError as e:
        return Err(PublishError(kind="invalid_config", message=f"error reading config {path}: {e}"))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(PublishError(kind="invalid_config", message="config root must be a TOML table"))
    return Ok(data)


def load_config(path: Path) -> Result[PublishConfig, PublishError]:
    """Load the ``[publish]`` table of a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(PublishConfig) on success, Err(PublishError) on failure
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    publish = get_table(parsed.value, "publish")
    if publish is None:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"missing [publish] table in {path}",
                hint="put the publish settings under a [publish] header",
            )
        )
    return Ok(PublishConfig.from_dict(publish, base_dir=path.parent))


def validate_config(config: PublishConfig) -> Result[PublishConfig, PublishError]:
    """Reject configs Google Play would refuse, before creating an edit."""
    if not config.package_name:
        return Err(PublishError(kind="invalid_config", message="package name is required"))
    if not config.app_paths:
        return Err(
            PublishError(
                kind="invalid_config",
                message="no app path given",
                hint="pass at least one .apk or .aab with --app-path",
            )
        )
    if not config.track:
        return Err(PublishError(kind="invalid_config", message="track is required"))

    release = config.release
    known = [str(s) for s in ReleaseStatus]
    if release.status and release.status not in known:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"invalid release status: {release.status}",
                hint=f"expected one of: {', '.join(known)}",
            )
        )
    if not 0.0 <= release.user_fraction <= 1.0:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"user fraction must be between 0 and 1, got {release.user_fraction}",
            )
        )
    if not 0 <= release.update_priority <= MAX_UPDATE_PRIORITY:
        return Err(
            PublishError(
                kind="invalid_config",
                message=f"update priority must be between 0 and {MAX_UPDATE_PRIORITY}, "
                f"got {release.update_priority}",
            )
        )
    return Ok(config)
