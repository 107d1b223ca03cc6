"""Publish orchestration.

One run = one edit session: upload artifacts, attach expansion and mapping
files, set the track release, then commit. Dry runs validate instead of
committing. A failed or dry run deletes its edit.
"""

from __future__ import annotations

from dataclasses import dataclass

from playdeploy.core.result import Err, Ok, Result
from playdeploy.output.console import ConsoleProtocol
from playdeploy.publish.client import PublisherClient
from playdeploy.publish.config import PublishConfig
from playdeploy.publish.errors import PublishError
from playdeploy.publish.model import ArtifactKind, PublishSummary, UploadResult
from playdeploy.publish.release import build_release
from playdeploy.publish.uploads import (
    upload_apk,
    upload_bundle,
    upload_expansion_file,
    upload_mapping_file,
)


@dataclass(frozen=True, slots=True)
class PublishService:
    client: PublisherClient
    config: PublishConfig
    console: ConsoleProtocol | None = None

    def _check_artifacts(self) -> Result[list[ArtifactKind], PublishError]:
        kinds: list[ArtifactKind] = []
        for path in self.config.app_paths:
            kind = ArtifactKind.from_path(path)
            if kind is None:
                return Err(
                    PublishError(
                        kind="invalid_config",
                        message=f"unsupported app file: {path}",
                        hint="expected an .apk or .aab file",
                    )
                )
            kinds.append(kind)
        return Ok(kinds)

    def _upload_artifact(self, edit_id: str, kind: ArtifactKind, index: int) -> Result[UploadResult, PublishError]:
        cfg = self.config
        path = cfg.app_paths[index]
        if kind is ArtifactKind.AAB:
            return upload_bundle(
                self.client,
                package_name=cfg.package_name,
                edit_id=edit_id,
                path=path,
                ack_installation_warning=cfg.ack_bundle_installation_warning,
                console=self.console,
            )

        uploaded = upload_apk(
            self.client,
            package_name=cfg.package_name,
            edit_id=edit_id,
            path=path,
            console=self.console,
        )
        if isinstance(uploaded, Err):
            return uploaded

        for entry in cfg.expansion_files:
            expansion = upload_expansion_file(
                self.client,
                entry,
                package_name=cfg.package_name,
                edit_id=edit_id,
                version_code=uploaded.value.version_code,
                console=self.console,
            )
            if isinstance(expansion, Err):
                return expansion
        return uploaded

    def _run(self, edit_id: str, kinds: list[ArtifactKind]) -> Result[PublishSummary, PublishError]:
        cfg = self.config
        version_codes: list[int] = []
        for index, kind in enumerate(kinds):
            uploaded = self._upload_artifact(edit_id, kind, index)
            if isinstance(uploaded, Err):
                return uploaded
            version_codes.append(uploaded.value.version_code)

        if cfg.mapping_file is not None:
            for version_code in version_codes:
                mapped = upload_mapping_file(
                    self.client,
                    edit_id=edit_id,
                    version_code=version_code,
                    package_name=cfg.package_name,
                    path=cfg.mapping_file,
                    console=self.console,
                )
                if isinstance(mapped, Err):
                    return mapped

        release = build_release(cfg.release, version_codes, console=self.console)
        if isinstance(release, Err):
            return release

        if self.console is not None:
            self.console.info(f"Updating track '{cfg.track}' with release status '{release.value.status}'")
        updated = self.client.update_track(
            cfg.package_name,
            edit_id,
            cfg.track,
            {"track": cfg.track, "releases": [release.value.to_api()]},
        )
        if isinstance(updated, Err):
            return Err(
                PublishError(
                    kind="remote_rejected",
                    message=f"failed to update track '{cfg.track}', error: {updated.error}",
                )
            )

        if cfg.dry_run:
            validated = self.client.validate_edit(cfg.package_name, edit_id)
            if isinstance(validated, Err):
                return Err(
                    PublishError(kind="remote_rejected", message=f"failed to validate edit, error: {validated.error}")
                )
            committed_id = edit_id
        else:
            committed = self.client.commit_edit(
                cfg.package_name,
                edit_id,
                changes_not_sent_for_review=cfg.changes_not_sent_for_review,
            )
            if isinstance(committed, Err):
                hint = None
                if "changesNotSentForReview" in str(committed.error):
                    hint = "retry with --changes-not-sent-for-review"
                return Err(
                    PublishError(
                        kind="remote_rejected",
                        message=f"failed to commit edit, error: {committed.error}",
                        hint=hint,
                    )
                )
            committed_id = committed.value

        return Ok(
            PublishSummary(
                edit_id=committed_id,
                track=cfg.track,
                version_codes=release.value.version_codes,
                status=release.value.status,
                committed=not cfg.dry_run,
            )
        )

    def publish(self) -> Result[PublishSummary, PublishError]:
        cfg = self.config
        kinds = self._check_artifacts()
        if isinstance(kinds, Err):
            return kinds

        edit = self.client.insert_edit(cfg.package_name)
        if isinstance(edit, Err):
            return Err(
                PublishError(
                    kind="remote_rejected",
                    message=f"failed to create edit for '{cfg.package_name}', error: {edit.error}",
                    hint="check the package name and that the service account has access to the app",
                )
            )
        edit_id = edit.value
        if self.console is not None:
            self.console.debug(f"Created edit {edit_id}")

        result = self._run(edit_id, kinds.value)
        if isinstance(result, Err) or cfg.dry_run:
            self._discard(edit_id)
        return result

    def _discard(self, edit_id: str) -> None:
        deleted = self.client.delete_edit(self.config.package_name, edit_id)
        if isinstance(deleted, Err) and self.console is not None:
            self.console.warning(f"failed to delete edit {edit_id}: {deleted.error}")
