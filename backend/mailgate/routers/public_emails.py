"""
Public email lookup endpoints (email + password auth, no session).

Endpoints:
  POST /verify         - check a mail account credential
  POST /list           - list the account's emails
  POST /sync-and-list  - best-effort mailbox sync, then list
  POST /detail         - fetch one email owned by the account

Every endpoint authenticates from the request body. Successful responses are
wrapped as {"success": true, "data": ...}; failures are rendered by the
PublicMailError handler in mailgate.main.
"""

import logging

from fastapi import APIRouter, Depends, Request

from mailgate.errors import UpstreamFailure
from mailgate.models.account import PublicEmailAuthRequest
from mailgate.models.email import (
    PublicGetEmailDetailRequest,
    PublicGetEmailsRequest,
    PublicSyncAndGetEmailsRequest,
)
from mailgate.services.public_mail import PublicMailService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_public_mail_service(request: Request) -> PublicMailService:
    """Return the service built at startup (overridden in tests)."""
    service = getattr(request.app.state, "public_mail_service", None)
    if service is None:
        logger.error("Public mail service requested before startup completed")
        raise UpstreamFailure("Mail store unavailable")
    return service


def respond_with_success(data) -> dict:
    if hasattr(data, "model_dump"):
        data = data.model_dump(by_alias=True)
    return {"success": True, "data": data}


@router.post("/verify", response_model=dict)
async def verify_email_account(
    body: PublicEmailAuthRequest,
    service: PublicMailService = Depends(get_public_mail_service),
):
    """
    Verify an email + password pair.

    Returns account_id, email, name and provider on success. Unknown email
    and wrong password both return the same 401.
    """
    verification = await service.verify_credential(body.email, body.password)
    return respond_with_success(verification)


@router.post("/list", response_model=dict)
async def list_emails(
    body: PublicGetEmailsRequest,
    service: PublicMailService = Depends(get_public_mail_service),
):
    """
    List emails of the authenticated account.

    Defaults: page=1, page_size=20, sort_by=date, sort_order=desc.
    Optional search and folder_id narrow the result.
    """
    response = await service.list_emails(
        body.email,
        body.password,
        page=body.page,
        page_size=body.page_size,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
        search=body.search,
        folder_id=body.folder_id,
    )
    return respond_with_success(response)


@router.post("/sync-and-list", response_model=dict)
async def sync_and_list_emails(
    body: PublicSyncAndGetEmailsRequest,
    service: PublicMailService = Depends(get_public_mail_service),
):
    """
    Sync the account's mailbox, then list its emails.

    A failed sync is not reported: the listing reflects whatever is stored.
    """
    response = await service.sync_and_list_emails(
        body.email,
        body.password,
        page=body.page,
        page_size=body.page_size,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
        search=body.search,
    )
    return respond_with_success(response)


@router.post("/detail", response_model=dict)
async def get_email_detail(
    body: PublicGetEmailDetailRequest,
    service: PublicMailService = Depends(get_public_mail_service),
):
    """
    Fetch one email.

    404 if the email does not exist, 403 if it belongs to another account.
    """
    email = await service.get_email_detail(body.email, body.password, body.email_id)
    return respond_with_success(email)
