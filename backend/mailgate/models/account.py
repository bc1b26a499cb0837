"""
Pydantic models for mail accounts.
"""

from typing import Annotated, Optional, Union
from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field


def _check_email_syntax(value: str) -> str:
    """
    Reject malformed addresses but return the caller's string untouched.

    Account lookup is an exact match, so the normalised form produced by
    email-validator (lowercased domain) must not replace the input.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from e
    return value


# Syntax-checked email address, kept exactly as supplied
AccountEmail = Annotated[str, AfterValidator(_check_email_syntax)]


class Account(BaseModel):
    """Full email_accounts record from the database."""
    model_config = {"from_attributes": True, "extra": "ignore"}

    id: int
    user_id: Optional[Union[int, str]] = None
    email: str
    # Stored secret. Either a pbkdf2_sha256 hash or a legacy plaintext value;
    # see mailgate.services.credentials. Never serialised back to callers.
    password: str = Field(default="", exclude=True, repr=False)
    name: Optional[str] = None
    provider: Optional[str] = None


class PublicEmailAuthRequest(BaseModel):
    """Request body for POST /verify."""
    email: AccountEmail
    password: str = Field(min_length=1)


class AccountVerification(BaseModel):
    """Response payload for a successful credential check."""
    valid: bool = True
    account_id: int
    email: str
    name: Optional[str] = None
    provider: Optional[str] = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountVerification":
        return cls(
            account_id=account.id,
            email=account.email,
            name=account.name,
            provider=account.provider,
        )
