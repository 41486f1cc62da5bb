"""
Dependency injection for the portal API.

Long-lived clients (Cosmos, Blob Storage) are built once through cached
factories; request handlers receive them through FastAPI ``Depends`` so tests
can swap any of them with ``app.dependency_overrides``.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from azure.cosmos import ContainerProxy, CosmosClient, PartitionKey
from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.identity import DefaultAzureCredential
from fastapi import Depends, Request

from .config import AppConfig, get_config
from .errors.handler import DefaultErrorHandler, ErrorHandler

from ..services.components.component_audit_service import ComponentAuditService
from ..services.components.component_repository import ComponentRepository
from ..services.components.component_version_service import ComponentVersionService
from ..services.storage.blob_service import EvidenceStorageService


logger = logging.getLogger(__name__)


# Partition key and unique key layout per logical container
CONTAINER_LAYOUT: Dict[str, Dict[str, Any]] = {
    "components": {
        "partition_key": "/component_code",
        "unique_keys": [["/component_code", "/version"]],
    },
    "component_mappings": {"partition_key": "/id", "unique_keys": []},
    "component_files": {"partition_key": "/component_id", "unique_keys": []},
    "component_audit_logs": {"partition_key": "/id", "unique_keys": []},
}


def get_error_handler(request: Request) -> ErrorHandler:
    """Provide a request-scoped error handler with structured context."""

    endpoint = request.scope.get("endpoint")
    module_name = getattr(endpoint, "__module__", "cm_portal") if endpoint else "cm_portal"
    base_context = {
        "path": request.url.path,
        "method": request.method,
    }
    return DefaultErrorHandler(lambda: logging.getLogger(f"{module_name}.errors"), base_context=base_context)


# === Configuration Dependencies ===
def get_app_config() -> AppConfig:
    return get_config()


# === Database Service ===
class CosmosService:
    """Lazily connected Cosmos DB client with a per-container cache."""

    def __init__(self, config: AppConfig):
        self.config = config
        self._client: Optional[CosmosClient] = None
        self._database = None
        self._containers: Dict[str, ContainerProxy] = {}
        self._is_available: Optional[bool] = None

    def is_available(self) -> bool:
        """Cosmos is considered available once an endpoint is configured."""
        if self._is_available is None:
            self._is_available = self.config.cosmos_configured
        return self._is_available

    @property
    def client(self) -> CosmosClient:
        """Lazy-initialize Cosmos client"""
        if self._client is None:
            endpoint = self.config.cosmos_endpoint
            if not endpoint:
                raise RuntimeError("Cosmos DB endpoint not configured. Set 'AZURE_COSMOS_ENDPOINT' env var.")

            if self.config.cosmos_key:
                logger.info("Using Cosmos key auth for Cosmos client initialization")
                credential: Any = self.config.cosmos_key
            else:
                logger.info("No Cosmos key configured; using DefaultAzureCredential")
                credential = DefaultAzureCredential()

            self._client = CosmosClient(url=endpoint, credential=credential)
        return self._client

    @property
    def database(self):
        if self._database is None:
            db_name = self.config.cosmos_database
            try:
                self._database = self.client.get_database_client(db_name)
            except CosmosHttpResponseError as e:
                logger.error(
                    "Failed to get Cosmos database client",
                    exc_info=True,
                    extra={"database_name": db_name, "status_code": e.status_code},
                )
                raise RuntimeError(
                    f"Failed to get Cosmos database client for '{db_name}'. Status={e.status_code}. Original: {e}"
                ) from e
        return self._database

    def get_container(self, container_name: str) -> ContainerProxy:
        """Get container reference with caching"""
        if container_name not in self._containers:
            actual_name = self.config.cosmos_containers.get(container_name, container_name)
            try:
                self._containers[container_name] = self.database.get_container_client(actual_name)
            except CosmosHttpResponseError as e:
                logger.error(
                    "Cosmos error getting container",
                    exc_info=True,
                    extra={"container_name": actual_name, "status_code": e.status_code},
                )
                raise RuntimeError(
                    f"Failed to get Cosmos container '{actual_name}'. Status={e.status_code}. Error: {e}"
                ) from e
        return self._containers[container_name]

    def ensure_containers(self) -> Dict[str, str]:
        """Create any missing container with its partition and unique keys.

        The ``(component_code, version)`` unique key on the components
        container is what makes concurrent REPLACE requests safe: the second
        insert of the same version fails instead of duplicating it.
        """
        created: Dict[str, str] = {}
        for logical_name, layout in CONTAINER_LAYOUT.items():
            actual_name = self.config.cosmos_containers[logical_name]
            unique_key_policy = None
            if layout["unique_keys"]:
                unique_key_policy = {"uniqueKeys": [{"paths": paths} for paths in layout["unique_keys"]]}
            self._containers[logical_name] = self.database.create_container_if_not_exists(
                id=actual_name,
                partition_key=PartitionKey(path=layout["partition_key"]),
                unique_key_policy=unique_key_policy,
            )
            created[logical_name] = actual_name
        logger.info("Cosmos containers ready", extra={"containers": created})
        return created


@lru_cache()
def _build_cosmos_service() -> CosmosService:
    return CosmosService(get_config())


def get_cosmos_service() -> CosmosService:
    """Get the cached CosmosDB service instance."""
    return _build_cosmos_service()


# === Storage Service ===
@lru_cache()
def _build_storage_service() -> EvidenceStorageService:
    return EvidenceStorageService(get_config())


def get_evidence_storage_service() -> EvidenceStorageService:
    """Provide the shared EvidenceStorageService instance."""
    return _build_storage_service()


# === Component Services ===
def get_component_repository(
    cosmos_service: CosmosService = Depends(get_cosmos_service),
) -> ComponentRepository:
    return ComponentRepository(cosmos_service)


def get_component_audit_service(
    cosmos_service: CosmosService = Depends(get_cosmos_service),
) -> ComponentAuditService:
    return ComponentAuditService(cosmos_service)


def get_component_version_service(
    repository: ComponentRepository = Depends(get_component_repository),
    storage: EvidenceStorageService = Depends(get_evidence_storage_service),
    audit: ComponentAuditService = Depends(get_component_audit_service),
    config: AppConfig = Depends(get_app_config),
) -> ComponentVersionService:
    return ComponentVersionService(repository, storage, audit, config)
