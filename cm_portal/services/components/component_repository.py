from typing import TYPE_CHECKING, Any, Dict, List, Optional
from datetime import date, datetime, timezone
import logging
import uuid

from azure.cosmos.exceptions import (
    CosmosHttpResponseError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)

from ...core.errors import ConflictError, DocumentNotFoundError
from ...utils.async_utils import run_sync

if TYPE_CHECKING:
    from ...core.dependencies import CosmosService

logger = logging.getLogger(__name__)

# Fields the repository owns; callers can never overwrite them through an update
_IMMUTABLE_FIELDS = ("id", "version", "type")

# Mapping values that fill in a component snapshot when the component lacks them
_MAPPING_FALLBACK_FIELDS = ("cm_code", "period_id", "component_valid_from", "component_valid_to")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-ready copy of ``data`` without Cosmos system properties."""
    document: Dict[str, Any] = {}
    for key, value in data.items():
        if key.startswith("_"):
            continue
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        document[key] = value
    return document


class ComponentRepository:
    """Cosmos DB persistence for components, mappings and evidence file records.

    Components are partitioned by ``component_code`` and the container enforces
    a unique ``(component_code, version)`` key, so a duplicate version insert
    surfaces here as a ``ConflictError``.
    """

    def __init__(self, cosmos_service: "CosmosService"):
        self.cosmos = cosmos_service

    @property
    def components(self):
        return self.cosmos.get_container("components")

    @property
    def mappings(self):
        return self.cosmos.get_container("component_mappings")

    @property
    def files(self):
        return self.cosmos.get_container("component_files")

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    async def _find_component(self, component_id: str) -> Optional[Dict[str, Any]]:
        query = "SELECT * FROM c WHERE c.id = @id AND c.type = 'component'"
        parameters = [{"name": "@id", "value": component_id}]
        results = await run_sync(lambda: list(self.components.query_items(
            query=query, parameters=parameters, enable_cross_partition_query=True
        )))
        return results[0] if results else None

    async def get_component_by_mapping_id(self, mapping_id: str) -> Optional[Dict[str, Any]]:
        """Return the component a mapping points at, or ``None``.

        The result is the component document with ``mapping_id`` added and the
        mapping's period and validity values filled in where the component has
        none.
        """
        try:
            mapping = await run_sync(lambda: self.mappings.read_item(item=mapping_id, partition_key=mapping_id))
        except CosmosResourceNotFoundError:
            logger.info("Component mapping not found", extra={"mapping_id": mapping_id})
            return None

        component_id = mapping.get("component_id")
        component = await self._find_component(component_id) if component_id else None
        if component is None:
            logger.warning(
                "Mapping references a missing component",
                extra={"mapping_id": mapping_id, "component_id": component_id},
            )
            return None

        snapshot = dict(component)
        snapshot["mapping_id"] = mapping["id"]
        for key in _MAPPING_FALLBACK_FIELDS:
            if snapshot.get(key) in (None, "") and mapping.get(key) not in (None, ""):
                snapshot[key] = mapping[key]
        return snapshot

    async def update_component_details(self, component_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ``changes`` to a component in place; ``id`` and ``version`` never change."""
        existing = await self._find_component(component_id)
        if existing is None:
            raise DocumentNotFoundError(component_id, container="components")

        updated = _to_document(existing)
        updated.update({k: v for k, v in _to_document(changes).items() if k not in _IMMUTABLE_FIELDS})
        updated["last_update_date"] = _utc_now()

        old_code = existing.get("component_code")
        if updated.get("component_code") == old_code:
            return await run_sync(lambda: self.components.replace_item(item=component_id, body=updated))

        # The component code is the partition key, so a renamed component moves
        # to its new partition before the old document is removed
        logger.info(
            "Component code changed, moving component to its new partition",
            extra={"component_id": component_id, "from": old_code, "to": updated.get("component_code")},
        )
        try:
            moved = await run_sync(lambda: self.components.create_item(body=updated))
        except CosmosResourceExistsError as e:
            raise ConflictError(
                f"component {updated.get('component_code')} version {updated.get('version')} already exists",
                document_id=component_id,
            ) from e
        try:
            await run_sync(lambda: self.components.delete_item(item=component_id, partition_key=old_code))
        except CosmosHttpResponseError:
            # Two documents with one id must never survive; drop the new copy
            logger.error(
                "Failed to remove the old component document, removing the moved copy",
                exc_info=True,
                extra={"component_id": component_id, "from": old_code, "to": updated.get("component_code")},
            )
            new_code = updated.get("component_code")
            try:
                await run_sync(lambda: self.components.delete_item(item=component_id, partition_key=new_code))
            except CosmosHttpResponseError:
                logger.exception(
                    "Moved component copy left behind; both partitions hold this id",
                    extra={"component_id": component_id, "partitions": [old_code, new_code]},
                )
            raise
        return moved

    async def get_component_version(self, component_code: str) -> int:
        """Highest stored version for ``component_code``; 0 when there is none."""
        query = "SELECT VALUE MAX(c.version) FROM c WHERE c.component_code = @code AND c.type = 'component'"
        parameters = [{"name": "@code", "value": component_code}]
        results = await run_sync(lambda: list(self.components.query_items(
            query=query, parameters=parameters, partition_key=component_code
        )))
        current = results[0] if results else None
        return int(current) if current is not None else 0

    async def create_new_component_version(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = _to_document(data)
        document["id"] = str(uuid.uuid4())
        document["type"] = "component"
        document.setdefault("created_date", _utc_now())
        document.setdefault("last_update_date", document["created_date"])

        try:
            created = await run_sync(lambda: self.components.create_item(body=document))
        except CosmosResourceExistsError as e:
            raise ConflictError(
                f"component {document.get('component_code')} version {document.get('version')} already exists",
                document_id=document["id"],
                details={"component_code": document.get("component_code"), "version": document.get("version")},
            ) from e

        logger.info(
            "Created component version",
            extra={"component_id": created["id"], "component_code": created.get("component_code"), "version": created.get("version")},
        )
        return created

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    async def update_component_mapping(self, mapping_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        try:
            mapping = await run_sync(lambda: self.mappings.read_item(item=mapping_id, partition_key=mapping_id))
        except CosmosResourceNotFoundError as e:
            raise DocumentNotFoundError(mapping_id, container="component_mappings") from e

        updated = _to_document(mapping)
        updated.update({k: v for k, v in _to_document(changes).items() if k not in ("id", "type")})
        return await run_sync(lambda: self.mappings.replace_item(item=mapping_id, body=updated))

    async def create_new_component_mapping(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = _to_document(data)
        document["id"] = str(uuid.uuid4())
        document["type"] = "component_mapping"
        document.setdefault("created_date", _utc_now())

        try:
            created = await run_sync(lambda: self.mappings.create_item(body=document))
        except CosmosResourceExistsError as e:
            raise ConflictError("component mapping already exists", document_id=document["id"]) from e

        logger.info(
            "Created component mapping",
            extra={"mapping_id": created["id"], "component_id": created.get("component_id"), "version": created.get("version")},
        )
        return created

    # ------------------------------------------------------------------
    # Evidence file records
    # ------------------------------------------------------------------

    async def delete_old_files(self, component_id: str) -> int:
        """Delete every file record of a component; returns how many were removed."""
        query = "SELECT c.id FROM c WHERE c.component_id = @component_id"
        parameters = [{"name": "@component_id", "value": component_id}]
        records: List[Dict[str, Any]] = await run_sync(lambda: list(self.files.query_items(
            query=query, parameters=parameters, partition_key=component_id
        )))

        for record in records:
            record_id = record["id"]
            try:
                await run_sync(lambda: self.files.delete_item(item=record_id, partition_key=component_id))
            except CosmosResourceNotFoundError:
                logger.debug("File record already deleted", extra={"file_id": record_id})

        logger.info(
            f"🗑️ Deleted {len(records)} old file record(s)",
            extra={"component_id": component_id, "deleted": len(records)},
        )
        return len(records)

    async def insert_component_files(self, record: Dict[str, Any]) -> Dict[str, Any]:
        document = _to_document(record)
        document["id"] = str(uuid.uuid4())
        document["type"] = "component_file"
        document.setdefault("created_date", _utc_now())
        return await run_sync(lambda: self.files.create_item(body=document))
