from .domain import (
    ApplicationError,
    ComponentRequestError,
    ErrorCode,
    InvalidActionError,
    InvalidContentTypeError,
    MappingNotFoundError,
    MissingBoundaryError,
    MissingRequiredFieldsError,
    ResourceNotFoundError,
    ValidationError,
)
from .handler import ErrorHandler, DefaultErrorHandler
from .http import application_error_response

# Database exceptions
from .database import (
    DatabaseError,
    ConflictError,
    DocumentNotFoundError,
)

# Storage exceptions
from .storage import (
    StorageError,
    StorageNotConfiguredError,
    BlobUploadError,
)

__all__ = [
    # Core errors
    "ApplicationError",
    "ComponentRequestError",
    "DefaultErrorHandler",
    "ErrorCode",
    "ErrorHandler",
    "InvalidActionError",
    "InvalidContentTypeError",
    "MappingNotFoundError",
    "MissingBoundaryError",
    "MissingRequiredFieldsError",
    "ResourceNotFoundError",
    "ValidationError",
    "application_error_response",
    # Database errors
    "DatabaseError",
    "ConflictError",
    "DocumentNotFoundError",
    # Storage errors
    "StorageError",
    "StorageNotConfiguredError",
    "BlobUploadError",
]
