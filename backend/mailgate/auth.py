"""
Credential authentication and email ownership verification for the public
lookup endpoints.

There is no session or token here: every request carries the mail account's
email address and secret and is authenticated from scratch.

- authenticate_by_credential fails with one indistinguishable Unauthorized
  for an unknown email, a wrong secret and a failed lookup, so the endpoint
  cannot be used to enumerate which addresses have accounts.
- verify_email_ownership is the post-fetch check for single-email lookups,
  which are not account-scoped in the store.
"""

import logging

from mailgate.errors import Forbidden, Unauthorized
from mailgate.models.account import Account
from mailgate.models.email import Email
from mailgate.services.account_store import AccountStore

logger = logging.getLogger(__name__)


async def authenticate_by_credential(email: str, secret: str, account_store: AccountStore) -> Account:
    """
    Resolve the account whose email and secret both match.

    Args:
        email: Account email address (already syntax-checked)
        secret: Plaintext secret supplied by the caller

    Returns:
        The matching Account.

    Raises:
        Unauthorized: no match, or the lookup itself failed
    """
    if not email or not secret:
        raise Unauthorized()

    try:
        account = await account_store.find_by_credential(email, secret)
    except Exception as e:
        # Same outward failure as a bad password; the cause stays in the log
        logger.warning(f"Account lookup failed for {email}: {e}")
        raise Unauthorized()

    if account is None:
        logger.info(f"Credential check failed for {email}")
        raise Unauthorized()

    return account


def verify_email_ownership(email: Email, account: Account) -> Email:
    """
    Return the email if it belongs to the authenticated account.

    Raises:
        Forbidden: the email exists but belongs to another account. The owner
            is not revealed.
    """
    if email.account_id != account.id:
        logger.warning(f"Account {account.id} requested email {email.id} owned by another account")
        raise Forbidden()
    return email
