"""
Database-specific exceptions for Cosmos DB operations.

Repository methods translate Azure SDK errors into these so the service layer
can react to specific failures (a version conflict is retried) without
depending on the SDK.
"""
from typing import Any, Dict, Optional

from .domain import ApplicationError, ErrorCode


class DatabaseError(ApplicationError):
    """Base exception for all database-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code, status_code, details)


class ConflictError(DatabaseError):
    """Raised when an insert collides with a unique key (duplicate component version)."""

    def __init__(
        self,
        reason: str,
        document_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"Database conflict: {reason}"

        enriched_details: Dict[str, Any] = {}
        if document_id:
            enriched_details["document_id"] = document_id
        if details:
            enriched_details.update(details)

        super().__init__(message, ErrorCode.RESOURCE_CONFLICT, 409, enriched_details)


class DocumentNotFoundError(DatabaseError):
    """Raised when a document that must exist is missing."""

    def __init__(
        self,
        document_id: str,
        container: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"Document '{document_id}' not found"
        if container:
            message += f" in container '{container}'"

        enriched_details = {"document_id": document_id, "container": container}
        if details:
            enriched_details.update(details)

        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, 404, enriched_details)


__all__ = [
    "DatabaseError",
    "ConflictError",
    "DocumentNotFoundError",
]
