"""
Storage-specific exceptions for Azure Blob Storage operations.
"""
from typing import Any, Dict, Optional

from .domain import ApplicationError, ErrorCode


class StorageError(ApplicationError):
    """Base exception for all storage-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code, status_code, details)


class StorageNotConfiguredError(StorageError):
    """Raised when an upload is attempted without a storage account URL."""

    def __init__(self) -> None:
        super().__init__(
            "Azure Blob Storage is not configured. Set 'AZURE_STORAGE_ACCOUNT_URL'.",
            ErrorCode.EXTERNAL_SERVICE_ERROR,
            503,
        )


class BlobUploadError(StorageError):
    """Raised when blob upload fails."""

    def __init__(
        self,
        blob_name: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"Failed to upload blob '{blob_name}'"
        if reason:
            message += f": {reason}"

        enriched_details = {"blob_name": blob_name}
        if details:
            enriched_details.update(details)

        super().__init__(message, ErrorCode.EXTERNAL_SERVICE_ERROR, 500, enriched_details)


__all__ = [
    "StorageError",
    "StorageNotConfiguredError",
    "BlobUploadError",
]
