"""
Public mail lookup service.

Ties the collaborators together for the four public operations:

  verify_credential    - credential check only
  list_emails          - authenticate → normalise → scoped query
  sync_and_list_emails - authenticate → best-effort sync → list
  get_email_detail     - authenticate → fetch by id → ownership check

Collaborators are passed in explicitly; the service keeps no per-request
state, so one instance can serve concurrent requests.
"""

import logging
from typing import Optional

from mailgate.auth import authenticate_by_credential, verify_email_ownership
from mailgate.errors import NotFound, UpstreamFailure
from mailgate.models.account import Account, AccountVerification
from mailgate.models.email import Email, EmailListResponse, EmailQuery
from mailgate.services.account_store import AccountStore
from mailgate.services.email_query import EmailQueryService
from mailgate.services.normalizer import normalize_email_query
from mailgate.services.sync import SYNC_TIMEOUT_SECONDS, SyncEngine, trigger_sync

logger = logging.getLogger(__name__)


class PublicMailService:
    def __init__(
        self,
        account_store: AccountStore,
        email_service: EmailQueryService,
        sync_engine: SyncEngine,
        sync_timeout: float = SYNC_TIMEOUT_SECONDS,
    ):
        self.account_store = account_store
        self.email_service = email_service
        self.sync_engine = sync_engine
        self.sync_timeout = sync_timeout

    async def authenticate(self, email: str, password: str) -> Account:
        return await authenticate_by_credential(email, password, self.account_store)

    async def verify_credential(self, email: str, password: str) -> AccountVerification:
        account = await self.authenticate(email, password)
        return AccountVerification.from_account(account)

    async def list_for_account(self, account: Account, query: EmailQuery) -> EmailListResponse:
        """
        Run one scoped listing query for an already authenticated account.

        Raises:
            UpstreamFailure: the query service failed; no partial results
        """
        try:
            return await self.email_service.query(account.id, query)
        except Exception as e:
            logger.error(f"Email listing failed for account {account.id}: {e}", exc_info=True)
            raise UpstreamFailure()

    async def list_emails(
        self,
        email: str,
        password: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        search: Optional[str] = None,
        folder_id: Optional[int] = None,
    ) -> EmailListResponse:
        account = await self.authenticate(email, password)
        query = normalize_email_query(page, page_size, sort_by, sort_order, search, folder_id)
        return await self.list_for_account(account, query)

    async def sync_and_list_emails(
        self,
        email: str,
        password: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        search: Optional[str] = None,
    ) -> EmailListResponse:
        account = await self.authenticate(email, password)

        # Completion gates the query, success does not
        await trigger_sync(self.sync_engine, account.id, timeout=self.sync_timeout)

        query = normalize_email_query(page, page_size, sort_by, sort_order, search)
        return await self.list_for_account(account, query)

    async def get_email_detail(self, email: str, password: str, email_id: int) -> Email:
        """
        Fetch one email for the authenticated account.

        Raises:
            Unauthorized: bad credentials
            NotFound: no email with this id
            Forbidden: the email belongs to another account
            UpstreamFailure: the lookup failed
        """
        account = await self.authenticate(email, password)

        try:
            found = await self.email_service.get(email_id)
        except Exception as e:
            logger.error(f"Email lookup failed for id {email_id}: {e}", exc_info=True)
            raise UpstreamFailure("Failed to get email")

        if found is None:
            raise NotFound()

        return verify_email_ownership(found, account)
