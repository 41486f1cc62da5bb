"""
CM Browser - filtering and pagination over the static CM dataset

Pure functions: callers pass the records and the view state (selected
filter values, page, page size) and get new values back.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, TypeVar, Union

from ...core.errors import ValidationError
from ...data.cm_data import CM_DATA, SAMPLE_COMPONENTS, SAMPLE_SKUS
from ...models.browse_models import CMDetail, CMRecord, CMRow

T = TypeVar("T")

PerPage = Union[int, str]

ALL = "All"
PER_PAGE_OPTIONS = (5, 10, 20, 25, ALL)
DEFAULT_PER_PAGE = 10

STATUS_COLOURS = {
    "Pending": "#ffc107",
    "Rejected": "#ff3b3b",
}
DEFAULT_STATUS_COLOUR = "#30ea03"


@dataclass(frozen=True)
class PageResult:
    records: List[Any]
    page: int
    per_page: PerPage
    total: int
    total_pages: int


def _field(record: Any, key: str) -> Any:
    return record[key] if isinstance(record, dict) else getattr(record, key)


def unique_values(records: Iterable[Any], key: str) -> List[Any]:
    """Distinct values of ``key`` in first-seen order."""
    return list(dict.fromkeys(_field(record, key) for record in records))


def filter_records(
    records: Sequence[T],
    codes: Optional[Iterable[str]] = None,
    descriptions: Optional[Iterable[str]] = None,
    statuses: Optional[Iterable[str]] = None,
) -> List[T]:
    """Keep records matching any selected value of every non-empty selection."""
    selections = (
        ("cm_code", set(codes or ())),
        ("cm_description", set(descriptions or ())),
        ("signoff_status", set(statuses or ())),
    )
    result = list(records)
    for key, selected in selections:
        if selected:
            result = [record for record in result if _field(record, key) in selected]
    return result


def parse_per_page(value: Union[int, str, None]) -> PerPage:
    """Normalise a page size from a query string; raises for unsupported sizes."""
    if value is None or value == "":
        return DEFAULT_PER_PAGE
    if isinstance(value, str):
        if value.strip().lower() == ALL.lower():
            return ALL
        try:
            value = int(value.strip())
        except ValueError:
            value = None
    if value not in PER_PAGE_OPTIONS:
        raise ValidationError(
            f"per_page must be one of {', '.join(str(option) for option in PER_PAGE_OPTIONS)}",
            field="per_page",
        )
    return value


def paginate(records: Sequence[T], page: int = 1, per_page: PerPage = DEFAULT_PER_PAGE) -> PageResult:
    """Slice one page out of ``records``; the page number is clamped into range."""
    if per_page not in PER_PAGE_OPTIONS:
        raise ValidationError(f"Unsupported page size: {per_page}", field="per_page")

    total = len(records)
    size = total if per_page == ALL else int(per_page)
    total_pages = max(1, math.ceil(total / size)) if size else 1
    page = min(max(1, page), total_pages)

    if size:
        window = list(records[(page - 1) * size: page * size])
    else:
        window = []
    return PageResult(records=window, page=page, per_page=per_page, total=total, total_pages=total_pages)


def status_colour(status: str) -> str:
    return STATUS_COLOURS.get(status, DEFAULT_STATUS_COLOUR)


def to_row(record: CMRecord) -> CMRow:
    return CMRow(**record.model_dump(), status_colour=status_colour(record.signoff_status))


def get_cm_detail(cm_code: str, records: Sequence[CMRecord] = CM_DATA) -> Optional[CMDetail]:
    """CM record plus the sample SKU and component rows, or ``None`` for an unknown code."""
    record = next((item for item in records if item.cm_code == cm_code), None)
    if record is None:
        return None
    return CMDetail(cm=to_row(record), skus=list(SAMPLE_SKUS), components=list(SAMPLE_COMPONENTS))
