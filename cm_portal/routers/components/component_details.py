"""
Component Details Router - multipart UPDATE/REPLACE submissions

The body is parsed by Starlette's multipart parser; everything after the
content-type check is delegated to Form Ingestion and the
ComponentVersionService.
"""
import logging
import re

from fastapi import APIRouter, Depends, Path, Request

from ...core.dependencies import get_component_version_service, get_error_handler
from ...core.errors import (
    ComponentRequestError,
    ErrorHandler,
    InvalidContentTypeError,
    MissingBoundaryError,
)
from ...models.component_models import ComponentDetailsResponse, ErrorResponse
from ...services.components.component_version_service import ComponentVersionService
from ...services.components.form_ingestion import ingest_form

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["component-details"])

_BOUNDARY_PATTERN = re.compile(r"boundary=([^;]+)", re.IGNORECASE)


def _check_multipart(content_type: str) -> str:
    """Return the boundary of a multipart content type, or raise a 400 error."""
    if "multipart/form-data" not in content_type.lower():
        raise InvalidContentTypeError(content_type)

    match = _BOUNDARY_PATTERN.search(content_type)
    if not match or not match.group(1).strip():
        logger.warning("Multipart request without boundary", extra={"content_type": content_type})
        raise MissingBoundaryError()
    return match.group(1).strip()


@router.put(
    "/component-details/{mapping_id}",
    response_model=ComponentDetailsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed or incomplete submission"},
        404: {"model": ErrorResponse, "description": "Component mapping not found"},
        500: {"model": ErrorResponse, "description": "Failed to update component details"},
    },
)
async def update_component_details(
    request: Request,
    mapping_id: str = Path(..., description="Component mapping identifier"),
    service: ComponentVersionService = Depends(get_component_version_service),
    error_handler: ErrorHandler = Depends(get_error_handler),
):
    """Update a component in place or replace it with a new version."""
    content_type = request.headers.get("content-type", "")
    boundary = _check_multipart(content_type)
    logger.info(
        f"🔍 Component details submission for mapping {mapping_id}",
        extra={"mapping_id": mapping_id, "boundary_length": len(boundary)},
    )

    try:
        async with request.form() as form:
            ingested = await ingest_form(form)
        return await service.apply(mapping_id, ingested)
    except ComponentRequestError:
        raise
    except Exception as exc:
        error_handler.raise_internal(
            "update component details",
            exc,
            message="Failed to update component details",
            extra={"mapping_id": mapping_id},
        )
