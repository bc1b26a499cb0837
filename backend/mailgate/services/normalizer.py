"""
Normalization of public listing parameters.

Converts the optional paging/sort fields of a listing request into an
EmailQuery that is always safe to hand to the query service: defaults are
filled in, numbers are clamped and unknown sort values fall back to the
defaults instead of being rejected.
"""

import os
from typing import Optional

from mailgate.models.email import EmailQuery, SortOrder

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
DEFAULT_SORT_BY = "date"
DEFAULT_SORT_ORDER = SortOrder.DESC

MAX_PAGE = 10_000
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Public sort key → emails table column
SORT_COLUMNS = {
    "date": "date",
    "subject": "subject",
    "from": "from_address",
    "size": "size",
    "created_at": "created_at",
}


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def validate_pagination(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    """Apply defaults to non-positive values, then clamp to the allowed bounds."""
    if page is None or page <= 0:
        page = DEFAULT_PAGE
    if page_size is None or page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return _clamp(page, 1, MAX_PAGE), _clamp(page_size, 1, MAX_PAGE_SIZE)


def validate_sort_params(sort_by: Optional[str], sort_order: Optional[str]) -> tuple[str, SortOrder]:
    """Restrict sort field and direction to known values (case-insensitive)."""
    key = (sort_by or "").strip().lower()
    if key not in SORT_COLUMNS:
        key = DEFAULT_SORT_BY

    direction = (sort_order or "").strip().lower()
    try:
        order = SortOrder(direction)
    except ValueError:
        order = DEFAULT_SORT_ORDER

    return key, order


def normalize_email_query(
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    search: Optional[str] = None,
    folder_id: Optional[int] = None,
) -> EmailQuery:
    """
    Build a normalised EmailQuery from raw request fields.

    Defaults: page=1, page_size=20, sort_by="date", sort_order="desc".
    A blank search string is dropped.
    """
    page, page_size = validate_pagination(page, page_size)
    sort_by, order = validate_sort_params(sort_by, sort_order)

    search = (search or "").strip() or None

    return EmailQuery(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=order,
        search=search,
        folder_id=folder_id,
    )
