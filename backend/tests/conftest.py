"""
Shared fixtures: in-memory collaborators for the public mail service.

The fakes implement the same interfaces as the Supabase-backed store and
query service, so service and endpoint tests can check ordering, paging and
scoping against real data instead of mock call chains.
"""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from mailgate.models.account import Account
from mailgate.models.email import Email, EmailListResponse, EmailQuery, SortOrder
from mailgate.services.credentials import hash_secret, verify_secret
from mailgate.services.normalizer import SORT_COLUMNS
from mailgate.services.public_mail import PublicMailService


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class InMemoryAccountStore:
    def __init__(self, rows: list[dict], fail: bool = False):
        self.rows = rows
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def find_by_credential(self, email: str, secret: str) -> Optional[Account]:
        self.calls.append((email, secret))
        if self.fail:
            raise ConnectionError("connection refused")
        for row in sorted(self.rows, key=lambda r: r["id"]):
            if row["email"] == email and verify_secret(row["password"], secret):
                return Account(**row)
        return None


class InMemoryEmailQueryService:
    def __init__(self, emails: list[Email], fail: bool = False):
        self.emails = emails
        self.fail = fail
        self.queries: list[tuple[int, EmailQuery]] = []

    async def query(self, account_id: int, query: EmailQuery) -> EmailListResponse:
        self.queries.append((account_id, query))
        if self.fail:
            raise RuntimeError("emails table unavailable")

        matches = [e for e in self.emails if e.account_id == account_id]
        if query.folder_id is not None:
            matches = [e for e in matches if e.folder_id == query.folder_id]
        if query.search:
            needle = query.search.lower()
            matches = [
                e for e in matches
                if needle in e.subject.lower()
                or needle in e.from_address.lower()
                or needle in (e.text_body or "").lower()
            ]

        attr = SORT_COLUMNS[query.sort_by]
        matches.sort(
            key=lambda e: (getattr(e, attr), e.id),
            reverse=query.sort_order == SortOrder.DESC,
        )
        page = matches[query.offset:query.offset + query.page_size]
        return EmailListResponse(
            emails=page,
            total=len(matches),
            page=query.page,
            page_size=query.page_size,
        )

    async def get(self, email_id: int) -> Optional[Email]:
        if self.fail:
            raise RuntimeError("emails table unavailable")
        for e in self.emails:
            if e.id == email_id:
                return e
        return None


class RecordingSyncEngine:
    def __init__(self):
        self.synced: list[int] = []

    async def sync(self, account_id: int) -> None:
        self.synced.append(account_id)


class FailingSyncEngine:
    def __init__(self):
        self.attempts = 0

    async def sync(self, account_id: int) -> None:
        self.attempts += 1
        raise RuntimeError("IMAP server unreachable")


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------

ACCOUNT_A_EMAIL = "alice@example.com"
ACCOUNT_A_SECRET = "alice-secret"
ACCOUNT_B_EMAIL = "bob@example.com"
ACCOUNT_B_SECRET = "bob-secret"


def make_account_row(
    account_id: int,
    email: str,
    password: str,
    name: str = "Mailbox",
    provider: str = "gmail",
    user_id: int = 7,
) -> dict:
    return {
        "id": account_id,
        "user_id": user_id,
        "email": email,
        "password": password,
        "name": name,
        "provider": provider,
    }


def make_email(
    email_id: int,
    account_id: int,
    date: str,
    subject: str = "Hello",
    from_address: str = "sender@example.com",
    folder_id: Optional[int] = 1,
    text_body: str = "body",
    size: int = 1024,
) -> Email:
    return Email(
        id=email_id,
        account_id=account_id,
        folder_id=folder_id,
        subject=subject,
        from_address=from_address,
        to_addresses="owner@example.com",
        date=date,
        text_body=text_body,
        html_body=f"<p>{text_body}</p>",
        size=size,
        created_at=date,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def account_rows() -> list[dict]:
    """Account A (id=1, plaintext secret) and account B (id=2, hashed secret)."""
    return [
        make_account_row(1, ACCOUNT_A_EMAIL, ACCOUNT_A_SECRET, name="Alice", provider="gmail"),
        make_account_row(2, ACCOUNT_B_EMAIL, hash_secret(ACCOUNT_B_SECRET, iterations=1000),
                         name="Bob", provider="outlook", user_id=8),
    ]


@pytest.fixture()
def stored_emails() -> list[Email]:
    """A owns 101 and 102 (101 is older); B owns 201."""
    return [
        make_email(101, 1, "2025-01-01T09:00:00Z", subject="Invoice January", folder_id=1),
        make_email(102, 1, "2025-02-01T09:00:00Z", subject="Team lunch", folder_id=2,
                   from_address="Carol <carol@example.com>"),
        make_email(201, 2, "2025-01-15T09:00:00Z", subject="Bob private", folder_id=1),
    ]


@pytest.fixture()
def account_store(account_rows) -> InMemoryAccountStore:
    return InMemoryAccountStore(account_rows)


@pytest.fixture()
def email_service(stored_emails) -> InMemoryEmailQueryService:
    return InMemoryEmailQueryService(stored_emails)


@pytest.fixture()
def sync_engine() -> RecordingSyncEngine:
    return RecordingSyncEngine()


@pytest.fixture()
def mail_service(account_store, email_service, sync_engine) -> PublicMailService:
    return PublicMailService(account_store, email_service, sync_engine, sync_timeout=1)


@pytest.fixture()
def client(mail_service):
    """TestClient for the FastAPI app with the mail service replaced by fakes."""
    from mailgate.main import app
    from mailgate.routers.public_emails import get_public_mail_service

    app.dependency_overrides[get_public_mail_service] = lambda: mail_service
    yield TestClient(app)
    app.dependency_overrides.clear()
