"""
Shared pytest fixtures for the CM portal API tests.

Provides test configuration, Cosmos mocks and an in-memory repository / blob /
audit trio that behaves like the real collaborators (including the unique
``(component_code, version)`` constraint) so the versioning workflow can be
exercised end to end without Azure.
"""

import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Set
from unittest.mock import Mock

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from cm_portal.core.config import AppConfig
from cm_portal.core.dependencies import CosmosService
from cm_portal.core.errors import ConflictError, DocumentNotFoundError
from cm_portal.services.components.component_version_service import ComponentVersionService
from cm_portal.services.components.form_ingestion import FileDescriptor, IngestedForm
from cm_portal.services.storage.blob_service import UploadResult


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> AppConfig:
    """Provide test configuration without reading a local .env file."""
    return AppConfig(
        _env_file=None,
        environment="test",
        cosmos_endpoint="https://test-cosmos.documents.azure.com:443/",
        cosmos_key="test-cosmos-key",
        cosmos_database="test-db",
        cosmos_prefix="test_",
        azure_storage_account_url="https://teststorage.blob.core.windows.net",
        azure_storage_key="test-storage-key",
        azure_storage_evidence_container="test-evidence",
        component_version_max_attempts=3,
    )


# ============================================================================
# Azure Cosmos DB Mocking Fixtures
# ============================================================================

def _make_container() -> Mock:
    container = Mock()
    container.query_items.return_value = []
    container.create_item.side_effect = lambda body: {**body, "_rid": "test-rid", "_etag": "test-etag"}
    container.replace_item.side_effect = lambda item, body: {**body, "_rid": "test-rid", "_etag": "test-etag-2"}
    container.upsert_item.side_effect = lambda body: {**body, "_etag": "test-etag"}
    container.delete_item.return_value = None
    return container


@pytest.fixture
def mock_containers() -> Dict[str, Mock]:
    """One mock container per logical container name"""
    return {
        "components": _make_container(),
        "component_mappings": _make_container(),
        "component_files": _make_container(),
        "component_audit_logs": _make_container(),
    }


@pytest.fixture
def mock_cosmos_service(test_config, mock_containers):
    """Mock CosmosService whose get_container returns the matching mock container"""
    service = Mock(spec=CosmosService)
    service.config = test_config
    service.get_container = Mock(side_effect=lambda name: mock_containers[name])
    service.is_available = Mock(return_value=True)
    return service


# ============================================================================
# In-memory collaborators
# ============================================================================

class InMemoryComponentRepository:
    """Dict-backed stand-in for ComponentRepository."""

    def __init__(self):
        self.components: Dict[str, Dict[str, Any]] = {}
        self.mappings: Dict[str, Dict[str, Any]] = {}
        self.files: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self._next_id = 0
        # Version reads to report as stale (simulates a concurrent REPLACE)
        self.stale_version_reads = 0

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def seed(self, component: Dict[str, Any], mapping: Dict[str, Any]) -> None:
        self.components[component["id"]] = dict(component)
        self.mappings[mapping["id"]] = dict(mapping)

    async def get_component_by_mapping_id(self, mapping_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append("get_component_by_mapping_id")
        mapping = self.mappings.get(mapping_id)
        if mapping is None:
            return None
        component = self.components.get(mapping["component_id"])
        if component is None:
            return None
        snapshot = dict(component)
        snapshot["mapping_id"] = mapping_id
        for key in ("cm_code", "period_id", "component_valid_from", "component_valid_to"):
            if snapshot.get(key) in (None, "") and mapping.get(key) not in (None, ""):
                snapshot[key] = mapping[key]
        return snapshot

    async def update_component_details(self, component_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append("update_component_details")
        if component_id not in self.components:
            raise DocumentNotFoundError(component_id, container="components")
        component = self.components[component_id]
        component.update({k: v for k, v in changes.items() if k not in ("id", "version", "type")})
        component["last_update_date"] = datetime.now().isoformat()
        return dict(component)

    async def get_component_version(self, component_code: str) -> int:
        self.calls.append("get_component_version")
        versions = [c.get("version") or 0 for c in self.components.values() if c.get("component_code") == component_code]
        current = max(versions, default=0)
        if self.stale_version_reads > 0:
            self.stale_version_reads -= 1
            return max(current - 1, 0)
        return current

    async def create_new_component_version(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append("create_new_component_version")
        for existing in self.components.values():
            if (existing.get("component_code"), existing.get("version")) == (data.get("component_code"), data.get("version")):
                raise ConflictError(
                    f"component {data.get('component_code')} version {data.get('version')} already exists"
                )
        document = dict(data)
        document["id"] = self._new_id("component")
        document["type"] = "component"
        self.components[document["id"]] = document
        return dict(document)

    async def update_component_mapping(self, mapping_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append("update_component_mapping")
        if mapping_id not in self.mappings:
            raise DocumentNotFoundError(mapping_id, container="component_mappings")
        self.mappings[mapping_id].update(changes)
        return dict(self.mappings[mapping_id])

    async def create_new_component_mapping(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append("create_new_component_mapping")
        document = dict(data)
        document["id"] = self._new_id("mapping")
        document["type"] = "component_mapping"
        self.mappings[document["id"]] = document
        return dict(document)

    async def delete_old_files(self, component_id: str) -> int:
        self.calls.append("delete_old_files")
        doomed = [file_id for file_id, record in self.files.items() if record["component_id"] == component_id]
        for file_id in doomed:
            del self.files[file_id]
        return len(doomed)

    async def insert_component_files(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append("insert_component_files")
        document = dict(record)
        document["id"] = self._new_id("file")
        self.files[document["id"]] = document
        return dict(document)

    def files_for(self, component_id: str) -> List[Dict[str, Any]]:
        return [record for record in self.files.values() if record["component_id"] == component_id]


class FakeEvidenceStorage:
    """Records uploads; filenames listed in ``fail_filenames`` fail like a storage error would."""

    def __init__(self):
        self.uploads: List[Dict[str, Any]] = []
        self.fail_filenames: Set[str] = set()

    async def upload_single_file(self, buffer, filename, mimetype, cm_code, sku_code, component_code, period_key, category_tag):
        if filename in self.fail_filenames:
            return UploadResult(success=False, error=f"Failed to upload blob '{filename}': simulated outage")

        blob_name = f"{cm_code}/{sku_code}/{component_code}/{period_key}/{category_tag}/20240101_000000_000_{filename.replace(' ', '_')}"
        self.uploads.append({
            "buffer": buffer,
            "filename": filename,
            "mimetype": mimetype,
            "cm_code": cm_code,
            "sku_code": sku_code,
            "component_code": component_code,
            "period_key": period_key,
            "category_tag": category_tag,
            "blob_name": blob_name,
        })
        return UploadResult(
            success=True,
            blob_url=f"https://teststorage.blob.core.windows.net/test-evidence/{blob_name}",
            blob_name=blob_name,
        )


class FakeAuditService:
    """Collects audit rows; set ``error`` to make the next write fail."""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    async def insert_component_audit_log(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.rows.append(dict(snapshot))
        return dict(snapshot)


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def existing_component() -> Dict[str, Any]:
    return {
        "id": "component-existing",
        "type": "component",
        "sku_code": "SKU001",
        "cm_code": "CM001",
        "component_code": "C-1001",
        "component_description": "Bottle Cap",
        "version": 1,
        "formulation_reference": "F-01",
        "components_reference": "CR-001",
        "category_entry_id": "cat-1",
        "data_verification_entry_id": "dv-1",
        "user_id": "u-1",
        "signed_off_by": "approver",
        "signed_off_date": "2024-01-15",
        "mandatory_fields_completion_status": True,
        "evidence_provided": True,
        "document_status": "Draft",
        "component_quantity": 10.0,
        "is_active": True,
        "created_by": "7",
        "year": "2024",
        "periods": "P1",
        "period_id": "period-2024",
        "component_unit_weight_id": "uw-1",
    }


@pytest.fixture
def existing_mapping(existing_component) -> Dict[str, Any]:
    return {
        "id": "mapping-existing",
        "type": "component_mapping",
        "cm_code": "CM001",
        "sku_code": "SKU001",
        "component_id": existing_component["id"],
        "component_code": existing_component["component_code"],
        "version": 1,
        "period_id": "period-2024",
        "component_valid_from": "2024-01-01",
        "component_valid_to": "2024-12-31",
        "is_active": True,
    }


@pytest.fixture
def repository(existing_component, existing_mapping) -> InMemoryComponentRepository:
    repo = InMemoryComponentRepository()
    repo.seed(existing_component, existing_mapping)
    return repo


@pytest.fixture
def evidence_storage() -> FakeEvidenceStorage:
    return FakeEvidenceStorage()


@pytest.fixture
def audit_service() -> FakeAuditService:
    return FakeAuditService()


@pytest.fixture
def version_service(repository, evidence_storage, audit_service, test_config) -> ComponentVersionService:
    return ComponentVersionService(repository, evidence_storage, audit_service, test_config)


@pytest.fixture
def make_form():
    """Build an IngestedForm with valid required fields, overridable per test"""

    def _make(action: str = "UPDATE", files: Optional[Dict[str, List[FileDescriptor]]] = None, **overrides: Any) -> IngestedForm:
        fields: Dict[str, Any] = {
            "action": action,
            "componentCode": "C-1001",
            "componentDescription": "Bottle Cap v2",
            "validityFrom": datetime(2024, 1, 1),
            "validityTo": datetime(2024, 12, 31),
            "componentQuantity": 12.0,
            "kpisEvidenceMapping": "spec-sheet",
        }
        fields.update(overrides)
        return IngestedForm(fields=fields, files=files or {})

    return _make


@pytest.fixture
def make_file():
    def _make(field_name: str = "packagingEvidence", filename: str = "spec.pdf", content: Optional[bytes] = b"%PDF-1.4") -> FileDescriptor:
        return FileDescriptor(
            field_name=field_name,
            filename=filename,
            mimetype="application/pdf",
            size=len(content or b""),
            buffer=content,
            original_name=filename,
        )

    return _make


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def app_client():
    """TestClient for the app; dependency overrides are cleared afterwards"""
    from fastapi.testclient import TestClient
    from cm_portal.main import app

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def multipart_body():
    """Encode text fields as multipart/form-data without any file parts"""

    def _encode(fields: Dict[str, str], boundary: str = "----TestFormBoundary") -> tuple:
        parts = []
        for name, value in fields.items():
            parts.append(
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
                f"{value}\r\n"
            )
        parts.append(f"--{boundary}--\r\n")
        return "".join(parts).encode("utf-8"), f"multipart/form-data; boundary={boundary}"

    return _encode


@pytest.fixture
def valid_fields() -> Dict[str, str]:
    return {
        "action": "UPDATE",
        "componentCode": "C-1001",
        "componentDescription": "Bottle Cap v2",
        "validityFrom": "2024-01-01",
        "validityTo": "2024-12-31",
        "componentQuantity": "12",
        "kpisEvidenceMapping": "spec-sheet",
    }
