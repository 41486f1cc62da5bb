"""
Browse Services

Pure filter and pagination helpers over the static CM dataset.
"""

from .cm_browser import (
    PER_PAGE_OPTIONS,
    PageResult,
    filter_records,
    get_cm_detail,
    paginate,
    parse_per_page,
    status_colour,
    unique_values,
)

__all__ = [
    'PER_PAGE_OPTIONS',
    'PageResult',
    'filter_records',
    'get_cm_detail',
    'paginate',
    'parse_per_page',
    'status_colour',
    'unique_values',
]
