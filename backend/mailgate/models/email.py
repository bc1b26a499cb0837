"""
Pydantic models for stored emails and the public lookup endpoints.

Models:
  Email                          - DB row from the emails table
  EmailQuery                     - normalised listing parameters
  EmailListResponse              - one page of emails plus paging metadata
  PublicGetEmailsRequest         - body for POST /list
  PublicSyncAndGetEmailsRequest  - body for POST /sync-and-list
  PublicGetEmailDetailRequest    - body for POST /detail
"""

import math
from enum import Enum
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field, computed_field

from mailgate.models.account import AccountEmail


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ---------------------------------------------------------------------------
# Stored email
# ---------------------------------------------------------------------------

class Email(BaseModel):
    """
    Full emails record from the database.

    Address columns are stored as from_address / to_addresses / cc_addresses
    but exposed to callers as from / to / cc, which is what the mail page
    renders.
    """
    model_config = {"from_attributes": True, "extra": "ignore"}

    id: int
    account_id: int
    folder_id: Optional[int] = None
    message_id: Optional[str] = None
    subject: str = ""
    from_address: str = Field(
        default="",
        validation_alias=AliasChoices("from_address", "from"),
        serialization_alias="from",
    )
    to_addresses: str = Field(
        default="",
        validation_alias=AliasChoices("to_addresses", "to"),
        serialization_alias="to",
    )
    cc_addresses: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cc_addresses", "cc"),
        serialization_alias="cc",
    )
    date: Optional[str] = None
    preview: Optional[str] = None
    text_body: Optional[str] = None
    html_body: Optional[str] = None
    size: Optional[int] = None
    is_read: bool = False
    is_starred: bool = False
    created_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class EmailQuery(BaseModel):
    """
    Listing parameters after normalisation.

    Always well-formed: the query service trusts these values and does not
    validate them again.
    """
    page: int = 1
    page_size: int = 20
    sort_by: str = "date"
    sort_order: SortOrder = SortOrder.DESC
    search: Optional[str] = None
    folder_id: Optional[int] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class EmailListResponse(BaseModel):
    """One page of emails for a single account."""
    emails: List[Email] = []
    total: int = 0
    page: int = 1
    page_size: int = 20

    @computed_field  # type: ignore[misc]
    @property
    def total_pages(self) -> int:
        """Number of pages at the current page size; 1 when there are no emails."""
        if self.total <= 0:
            return 1
        return math.ceil(self.total / self.page_size)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class PublicGetEmailsRequest(BaseModel):
    """
    Request body for POST /list.

    Paging and sort fields are optional; missing or out-of-range values are
    filled in by the normalizer rather than rejected.
    """
    email: AccountEmail
    password: str = Field(min_length=1)
    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    search: Optional[str] = None
    folder_id: Optional[int] = None


class PublicSyncAndGetEmailsRequest(BaseModel):
    """Request body for POST /sync-and-list. Same as /list without folder_id."""
    email: AccountEmail
    password: str = Field(min_length=1)
    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    search: Optional[str] = None


class PublicGetEmailDetailRequest(BaseModel):
    """Request body for POST /detail."""
    email: AccountEmail
    password: str = Field(min_length=1)
    email_id: int
