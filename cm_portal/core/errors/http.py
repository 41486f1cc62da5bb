from fastapi.responses import JSONResponse

from .domain import ApplicationError


def application_error_response(error: ApplicationError) -> JSONResponse:
    """Build the ``{success: false, message, error, ...}`` envelope for an error."""
    return JSONResponse(status_code=error.status_code, content=error.as_dict())
