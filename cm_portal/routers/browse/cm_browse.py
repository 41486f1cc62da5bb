"""
CM Browse Router - list, filter options and detail for contract manufacturers
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from ...core.errors import ErrorCode, ResourceNotFoundError
from ...data.cm_data import CM_DATA
from ...models.browse_models import CMDetail, CMFilterOptions, CMPage
from ...services.browse.cm_browser import (
    PER_PAGE_OPTIONS,
    filter_records,
    get_cm_detail,
    paginate,
    parse_per_page,
    to_row,
    unique_values,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cm", tags=["cm-browse"])


@router.get("", response_model=CMPage)
async def list_cms(
    cm_code: List[str] = Query(default=[], description="CM codes to include"),
    cm_description: List[str] = Query(default=[], description="CM descriptions to include"),
    signoff_status: List[str] = Query(default=[], description="Signoff statuses to include"),
    page: int = Query(1, description="1-based page number, clamped to the available pages"),
    per_page: Optional[str] = Query(None, description="5, 10, 20, 25 or All"),
):
    """Filtered, paginated CM list"""
    size = parse_per_page(per_page)
    filtered = filter_records(CM_DATA, cm_code, cm_description, signoff_status)
    result = paginate(filtered, page, size)

    logger.debug(
        "CM list requested",
        extra={"matched": result.total, "page": result.page, "per_page": str(result.per_page)},
    )
    return CMPage(
        records=[to_row(record) for record in result.records],
        page=result.page,
        per_page=result.per_page,
        total=result.total,
        total_pages=result.total_pages,
    )


@router.get("/filter-options", response_model=CMFilterOptions)
async def get_filter_options():
    return CMFilterOptions(
        cm_codes=unique_values(CM_DATA, "cm_code"),
        cm_descriptions=unique_values(CM_DATA, "cm_description"),
        signoff_statuses=unique_values(CM_DATA, "signoff_status"),
        per_page_options=list(PER_PAGE_OPTIONS),
    )


@router.get("/{cm_code}", response_model=CMDetail)
async def get_cm(cm_code: str):
    detail = get_cm_detail(cm_code)
    if detail is None:
        raise ResourceNotFoundError(
            f"No details found for CM Code: {cm_code}",
            error_code=ErrorCode.CM_NOT_FOUND,
            details={"cm_code": cm_code},
        )
    return detail
