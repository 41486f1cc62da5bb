"""
Component Services

Form ingestion, Cosmos persistence, audit logging and the UPDATE/REPLACE
versioning workflow for component details.
"""

from .component_audit_service import ComponentAuditService
from .component_repository import ComponentRepository
from .component_version_service import ComponentVersionService, MutationTrace
from .form_ingestion import FileDescriptor, IngestedForm, ingest_form

__all__ = [
    'ComponentAuditService',
    'ComponentRepository',
    'ComponentVersionService',
    'FileDescriptor',
    'IngestedForm',
    'MutationTrace',
    'ingest_form',
]
