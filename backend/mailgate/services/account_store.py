"""
Account lookup against the email_accounts table.
"""

import logging
from typing import Optional, Protocol

from supabase import AsyncClient

from mailgate.models.account import Account
from mailgate.services.credentials import DUMMY_HASH, is_hashed, verify_secret

logger = logging.getLogger(__name__)

ACCOUNTS_TABLE = "email_accounts"


class AccountStore(Protocol):
    async def find_by_credential(self, email: str, secret: str) -> Optional[Account]:
        """Return the account whose email and secret both match, else None."""
        ...


class SupabaseAccountStore:
    """
    Account store backed by Supabase.

    Rows are selected by email only; the secret is checked in Python with
    verify_secret() so that it never ends up in a PostgREST filter (and
    therefore never in a request URL or an access log).

    A lookup that matches no hashed row still runs one PBKDF2 check against
    DUMMY_HASH, so an unknown address takes as long as a wrong secret.
    """

    def __init__(self, client: AsyncClient):
        self._client = client

    async def find_by_credential(self, email: str, secret: str) -> Optional[Account]:
        result = await (
            self._client.table(ACCOUNTS_TABLE)
            .select("*")
            .eq("email", email)
            .order("id")
            .execute()
        )

        hashed_checked = False
        for row in result.data or []:
            stored = row.get("password")
            if stored and is_hashed(stored):
                hashed_checked = True
            if verify_secret(stored, secret):
                return Account(**row)

        if not hashed_checked:
            verify_secret(DUMMY_HASH, secret)
        return None
