"""
Email query service backed by the Supabase emails table.

query() is always scoped to one account. get() looks an email up by bare id
and is NOT account-scoped; callers must check ownership on the result.
"""

import logging
from typing import Optional, Protocol

from postgrest.exceptions import APIError
from supabase import AsyncClient

from mailgate.models.email import Email, EmailListResponse, EmailQuery, SortOrder
from mailgate.services.normalizer import SORT_COLUMNS

logger = logging.getLogger(__name__)

EMAILS_TABLE = "emails"

# PostgREST error code returned when the requested offset is past the last row
RANGE_NOT_SATISFIABLE = "PGRST103"

# Columns matched by free-text search
SEARCH_COLUMNS = ("subject", "from_address", "text_body")


class EmailQueryService(Protocol):
    async def query(self, account_id: int, query: EmailQuery) -> EmailListResponse:
        ...

    async def get(self, email_id: int) -> Optional[Email]:
        ...


def _quote_filter_value(value: str) -> str:
    """Double-quote a value for a PostgREST or= filter so , ( ) . are literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _escape_like(value: str) -> str:
    """
    Make LIKE wildcards in user input literal.

    PostgREST turns * into % before the pattern reaches Postgres and offers
    no escape for it, so * becomes the single-character wildcard _ instead.
    """
    value = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return value.replace("*", "_")


def build_search_filter(search: str) -> str:
    """
    Build the or= filter for a case-insensitive substring search, e.g.

        subject.ilike."%invoice%",from_address.ilike."%invoice%",...
    """
    pattern = _quote_filter_value(f"%{_escape_like(search)}%")
    return ",".join(f"{column}.ilike.{pattern}" for column in SEARCH_COLUMNS)


class SupabaseEmailQueryService:
    """Listing and lookup of stored emails through PostgREST."""

    def __init__(self, client: AsyncClient):
        self._client = client

    def _apply_filters(self, builder, account_id: int, query: EmailQuery):
        # The account predicate is unconditional; folder and search only narrow it
        builder = builder.eq("account_id", account_id)
        if query.folder_id is not None:
            builder = builder.eq("folder_id", query.folder_id)
        if query.search:
            builder = builder.or_(build_search_filter(query.search))
        return builder

    async def _count(self, account_id: int, query: EmailQuery) -> int:
        builder = self._client.table(EMAILS_TABLE).select("id", count="exact", head=True)
        result = await self._apply_filters(builder, account_id, query).execute()
        return result.count or 0

    async def query(self, account_id: int, query: EmailQuery) -> EmailListResponse:
        column = SORT_COLUMNS[query.sort_by]
        desc = query.sort_order == SortOrder.DESC
        start = query.offset
        end = start + query.page_size - 1

        builder = self._client.table(EMAILS_TABLE).select("*", count="exact")
        builder = (
            self._apply_filters(builder, account_id, query)
            .order(column, desc=desc)
            .order("id", desc=desc)
            .range(start, end)
        )

        try:
            result = await builder.execute()
        except APIError as exc:
            if exc.code != RANGE_NOT_SATISFIABLE:
                raise
            # Page past the end: empty page, but keep the real total
            logger.info(
                f"Page {query.page} is past the end for account {account_id}; returning empty page"
            )
            return EmailListResponse(
                emails=[],
                total=await self._count(account_id, query),
                page=query.page,
                page_size=query.page_size,
            )

        rows = result.data or []
        return EmailListResponse(
            emails=[Email(**row) for row in rows],
            total=result.count if result.count is not None else len(rows),
            page=query.page,
            page_size=query.page_size,
        )

    async def get(self, email_id: int) -> Optional[Email]:
        result = await (
            self._client.table(EMAILS_TABLE)
            .select("*")
            .eq("id", email_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return Email(**result.data[0])
