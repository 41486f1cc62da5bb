from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Machine readable error codes returned in the `error` field."""

    # Request shape
    INVALID_CONTENT_TYPE = "INVALID_CONTENT_TYPE"
    MISSING_BOUNDARY = "MISSING_BOUNDARY"
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    INVALID_ACTION = "INVALID_ACTION"
    INVALID_INPUT = "INVALID_INPUT"

    # Resource Errors
    MAPPING_NOT_FOUND = "MAPPING_NOT_FOUND"
    CM_NOT_FOUND = "CM_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # System Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class ApplicationError(Exception):
    """Base application exception that captures rich error context.

    ``error`` is what clients see in the ``error`` field of the envelope and
    defaults to the error code. ``extra`` holds fields that are promoted to the
    top level of the response (for example ``missingFields``); ``details`` is
    nested under ``details``.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        *,
        error: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details: Dict[str, Any] = details or {}
        self.error = error if error is not None else error_code.value
        self.extra: Dict[str, Any] = extra or {}

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error": self.error,
        }
        payload.update(self.extra)
        if self.details:
            payload["details"] = self.details
        return payload


class ComponentRequestError(ApplicationError):
    """Client-side problems with a component details submission (4xx)."""


class InvalidContentTypeError(ComponentRequestError):
    def __init__(self, content_type: str) -> None:
        super().__init__(
            "Content-Type must be multipart/form-data",
            ErrorCode.INVALID_CONTENT_TYPE,
            400,
            {"content_type": content_type},
        )


class MissingBoundaryError(ComponentRequestError):
    def __init__(self) -> None:
        super().__init__(
            "Missing boundary parameter in multipart/form-data request. "
            "Please ensure Content-Type includes boundary.",
            ErrorCode.MISSING_BOUNDARY,
            400,
            extra={"expectedFormat": "multipart/form-data; boundary=----WebKitFormBoundary..."},
        )


class MissingRequiredFieldsError(ComponentRequestError):
    def __init__(self, missing_fields: List[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Missing required fields",
            ErrorCode.MISSING_REQUIRED_FIELDS,
            400,
            extra={"missingFields": self.missing_fields},
        )


class InvalidActionError(ComponentRequestError):
    def __init__(self, action: Any) -> None:
        super().__init__(
            "Invalid action. Must be UPDATE or REPLACE",
            ErrorCode.INVALID_ACTION,
            400,
            {"action": action},
        )


class MappingNotFoundError(ComponentRequestError):
    def __init__(self, mapping_id: str) -> None:
        super().__init__(
            "Component mapping not found",
            ErrorCode.MAPPING_NOT_FOUND,
            404,
            {"mapping_id": mapping_id},
        )


class ResourceNotFoundError(ApplicationError):
    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code, 404, details)


class ValidationError(ApplicationError):
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details_dict: Dict[str, Any] = details.copy() if details else {}
        if field:
            details_dict.setdefault("field", field)
        super().__init__(message, ErrorCode.INVALID_INPUT, 400, details_dict)
