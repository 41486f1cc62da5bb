"""
Component Version Service - applies an UPDATE or REPLACE submission

UPDATE edits the component a mapping points at. REPLACE leaves it untouched
and creates the next version of the component plus a new mapping for it.
Both branches upload any evidence files, record them and append one audit
snapshot. Steps are not rolled back; a ``MutationTrace`` records what was
committed so a partial failure is visible in the logs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception_type, stop_after_attempt

from ...config.component_fields import (
    AUDIT_SNAPSHOT_COLUMNS,
    CARRIED_FORWARD_COLUMNS,
    COMPONENT_COLUMN_MAP,
    DEFAULT_FILE_CATEGORY,
    FILE_CATEGORY_TAGS,
    REPLACE_EVIDENCE_COLUMNS,
    REQUIRED_FIELDS,
)
from ...core.config import AppConfig
from ...core.errors import (
    ConflictError,
    InvalidActionError,
    MappingNotFoundError,
    MissingRequiredFieldsError,
)
from ...models.component_models import ComponentAction, ComponentDetailsResponse, ComponentMutationData
from ..storage.blob_service import EvidenceStorageService
from .component_audit_service import ComponentAuditService
from .component_repository import ComponentRepository
from .form_ingestion import IngestedForm

logger = logging.getLogger(__name__)


@dataclass
class MutationTrace:
    """Ordered record of the persistence steps a request has committed."""

    mapping_id: str
    action: ComponentAction
    steps: List[Dict[str, Any]] = field(default_factory=list)

    def record(self, step: str, **details: Any) -> None:
        self.steps.append({"step": step, **details})
        logger.debug(f"✔ {step}", extra={"mapping_id": self.mapping_id, **details})

    def log_partial_failure(self, error: Exception) -> None:
        if not self.steps:
            return
        logger.error(
            f"❌ {self.action.value} failed after {len(self.steps)} committed step(s); nothing was rolled back",
            extra={
                "mapping_id": self.mapping_id,
                "action": self.action.value,
                "committed_steps": self.steps,
                "error": str(error),
            },
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ComponentVersionService:
    """Validates a component submission and applies it through the repository."""

    def __init__(
        self,
        repository: ComponentRepository,
        storage: EvidenceStorageService,
        audit: ComponentAuditService,
        config: AppConfig,
    ):
        self.repository = repository
        self.storage = storage
        self.audit = audit
        self.config = config

    async def apply(self, mapping_id: str, form: IngestedForm) -> ComponentDetailsResponse:
        """Validate ``form`` and apply it to the component behind ``mapping_id``.

        Raises:
            MissingRequiredFieldsError: a required field is absent or empty
            InvalidActionError: ``action`` is neither UPDATE nor REPLACE
            MappingNotFoundError: the mapping does not resolve to a component
        """
        # A submitted but unknown action is reported even when other fields are missing
        raw_action = form.get("action")
        if raw_action not in (None, "") and raw_action not in [a.value for a in ComponentAction]:
            raise InvalidActionError(raw_action)

        missing = form.missing(REQUIRED_FIELDS)
        if missing:
            raise MissingRequiredFieldsError(missing)
        action = ComponentAction(raw_action)

        existing = await self.repository.get_component_by_mapping_id(mapping_id)
        if existing is None:
            raise MappingNotFoundError(mapping_id)

        logger.info(
            f"🔍 Existing component found: ID {existing.get('id')}, Version {existing.get('version')}",
            extra={"mapping_id": mapping_id, "action": action.value, "cm_code": existing.get("cm_code")},
        )

        trace = MutationTrace(mapping_id, action)
        try:
            if action is ComponentAction.UPDATE:
                data = await self._update(existing, form, trace)
            else:
                data = await self._replace(existing, form, trace)
        except Exception as e:
            trace.log_partial_failure(e)
            raise

        logger.info(
            f"✅ Component {action.value.lower()} complete",
            extra={"mapping_id": mapping_id, **data.model_dump(mode="json")},
        )
        return ComponentDetailsResponse(message=action.success_message, data=data)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    async def _update(self, existing: Dict[str, Any], form: IngestedForm, trace: MutationTrace) -> ComponentMutationData:
        component_id = existing["id"]
        changes = {
            column: form.get(field_name)
            for field_name, column in COMPONENT_COLUMN_MAP.items()
            if field_name in form.fields
        }

        updated = await self.repository.update_component_details(component_id, changes)
        trace.record("component_updated", component_id=component_id, columns=sorted(changes))

        # Keep the mapping's copy of the component code in step with a renamed component
        new_code = updated.get("component_code")
        if new_code and new_code != existing.get("component_code"):
            await self.repository.update_component_mapping(existing["mapping_id"], {"component_code": new_code})
            trace.record("mapping_updated", mapping_id=existing["mapping_id"], component_code=new_code)

        files_uploaded = 0
        if form.has_files:
            deleted = await self.repository.delete_old_files(component_id)
            trace.record("old_files_deleted", component_id=component_id, deleted=deleted)
            files_uploaded = await self._upload_evidence(
                form, trace, component_id=component_id, component_code=existing.get("component_code"), source=existing
            )

        snapshot = self._audit_snapshot(existing, form, ComponentAction.UPDATE)
        snapshot["helper_column"] = f"UPDATE_ACTION: component_updated_{_utc_now().isoformat()}"
        await self.audit.insert_component_audit_log(snapshot)
        trace.record("audit_logged", component_id=component_id)

        return ComponentMutationData(
            component_id=component_id,
            version=updated.get("version", existing.get("version")),
            action=ComponentAction.UPDATE,
            files_uploaded=files_uploaded,
        )

    async def _replace(self, existing: Dict[str, Any], form: IngestedForm, trace: MutationTrace) -> ComponentMutationData:
        created = await self._create_next_version(existing, form)
        trace.record("component_version_created", component_id=created["id"], version=created["version"])

        mapping = await self.repository.create_new_component_mapping(self._new_mapping(existing, created, form))
        trace.record("mapping_created", mapping_id=mapping["id"], version=created["version"])

        files_uploaded = 0
        if form.has_files:
            files_uploaded = await self._upload_evidence(
                form, trace, component_id=created["id"], component_code=created.get("component_code"), source=existing
            )

        snapshot = self._audit_snapshot(created, form, ComponentAction.REPLACE)
        snapshot["superseded_version"] = existing.get("version")
        snapshot["helper_column"] = (
            f"REPLACE_ACTION: component_replaced_{_utc_now().isoformat()}_old_version_{existing.get('version')}"
        )
        await self.audit.insert_component_audit_log(snapshot)
        trace.record("audit_logged", component_id=created["id"])

        return ComponentMutationData(
            component_id=created["id"],
            version=created["version"],
            action=ComponentAction.REPLACE,
            files_uploaded=files_uploaded,
        )

    async def _create_next_version(self, existing: Dict[str, Any], form: IngestedForm) -> Dict[str, Any]:
        """Insert the next version, re-reading the current one after each conflict."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.component_version_max_attempts),
            retry=retry_if_exception_type(ConflictError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                current_version = await self.repository.get_component_version(existing["component_code"])
                new_version = current_version + 1
                logger.info(
                    f"📈 Current version: {current_version}, New version: {new_version}",
                    extra={"component_code": existing["component_code"], "attempt": attempt.retry_state.attempt_number},
                )
                return await self.repository.create_new_component_version(
                    self._new_component(existing, form, new_version)
                )
        raise RuntimeError("version allocation ended without a result")

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _created_by(self, form: IngestedForm, fallback: Optional[Any] = None) -> Any:
        return form.get("created_by") or fallback or self.config.default_created_by

    def _new_component(self, existing: Dict[str, Any], form: IngestedForm, version: int) -> Dict[str, Any]:
        now = _utc_now()
        component = {column: existing.get(column) for column in CARRIED_FORWARD_COLUMNS}
        component.update({column: form.get(field_name) for field_name, column in COMPONENT_COLUMN_MAP.items()})
        for column in REPLACE_EVIDENCE_COLUMNS:
            component[column] = form.get("kpisEvidenceMapping")
        component.update({
            "version": version,
            "is_active": True,
            "created_by": self._created_by(form, existing.get("created_by")),
            "created_date": now,
            "last_update_date": now,
        })
        return component

    def _new_mapping(self, existing: Dict[str, Any], created: Dict[str, Any], form: IngestedForm) -> Dict[str, Any]:
        return {
            "cm_code": existing.get("cm_code"),
            "sku_code": existing.get("sku_code"),
            "component_id": created["id"],
            "component_code": created.get("component_code"),
            "version": created["version"],
            "component_packaging_type_id": form.get("componentPackagingType"),
            "period_id": existing.get("period_id"),
            "component_valid_from": form.get("validityFrom"),
            "component_valid_to": form.get("validityTo"),
            "is_active": True,
            "created_by": self._created_by(form, existing.get("created_by")),
        }

    def _audit_snapshot(self, component: Dict[str, Any], form: IngestedForm, action: ComponentAction) -> Dict[str, Any]:
        now = _utc_now()
        snapshot = {column: component.get(column) for column in AUDIT_SNAPSHOT_COLUMNS}
        snapshot.update({
            "component_id": component["id"],
            "version": component.get("version"),
            "component_valid_from": component.get("component_valid_from", component.get("componentvaliditydatefrom")),
            "component_valid_to": component.get("component_valid_to", component.get("componentvaliditydateto")),
            "cm_code": form.get("cm_code") or component.get("cm_code") or self.config.default_cm_code,
            "action": action.audit_tag,
            "created_by": self._created_by(form),
            "created_date": now,
            "last_update_date": now,
        })
        return snapshot

    # ------------------------------------------------------------------
    # Evidence files
    # ------------------------------------------------------------------

    async def _upload_evidence(
        self,
        form: IngestedForm,
        trace: MutationTrace,
        component_id: str,
        component_code: Any,
        source: Dict[str, Any],
    ) -> int:
        """Upload every buffered file and record the ones that succeed."""
        period_key = source.get("year") or source.get("periods")
        uploaded = 0

        for descriptor in form.iter_files():
            if not descriptor.uploadable:
                logger.warning(
                    f"⚠️ Skipping {descriptor.filename}: no file contents",
                    extra={"field": descriptor.field_name, "file_name": descriptor.filename},
                )
                continue

            result = await self.storage.upload_single_file(
                descriptor.buffer,
                descriptor.filename,
                descriptor.mimetype,
                source.get("cm_code"),
                source.get("sku_code"),
                component_code,
                period_key,
                FILE_CATEGORY_TAGS.get(descriptor.field_name, DEFAULT_FILE_CATEGORY),
            )
            if not result.success:
                logger.error(
                    f"❌ File upload failed: {result.error}",
                    extra={"field": descriptor.field_name, "file_name": descriptor.filename},
                )
                continue

            await self.repository.insert_component_files({
                "component_id": component_id,
                "file_name": descriptor.filename,
                "file_url": result.blob_url,
                "file_type": descriptor.field_name,
                "created_by": self._created_by(form),
            })
            trace.record("file_recorded", component_id=component_id, file_name=descriptor.filename, blob_name=result.blob_name)
            uploaded += 1

        return uploaded
