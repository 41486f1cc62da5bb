"""
Storage Services

Azure Blob Storage uploads for component evidence files.
"""

from .blob_service import EvidenceStorageService, UploadResult

__all__ = [
    'EvidenceStorageService',
    'UploadResult',
]
