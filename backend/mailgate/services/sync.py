"""
Mailbox synchronization used by the sync-and-list endpoint.

The sync engine itself is an external service. This module holds the HTTP
client for it, a no-op engine for deployments without one, and
trigger_sync(), the best-effort wrapper the lookup service calls.

Environment variables
---------------------
SYNC_SERVICE_URL       Base URL of the sync engine. Unset → NoopSyncEngine.
SYNC_SERVICE_TOKEN     Optional bearer token sent to the sync engine.
SYNC_TIMEOUT_SECONDS   Upper bound on one best-effort sync (default: 30).
"""

import asyncio
import logging
import os
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

SYNC_TIMEOUT_SECONDS = float(os.getenv("SYNC_TIMEOUT_SECONDS", "30"))


class SyncEngine(Protocol):
    async def sync(self, account_id: int) -> None:
        """Refresh the mailbox of one account. Raises on failure."""
        ...


class NoopSyncEngine:
    """Sync engine used when no SYNC_SERVICE_URL is configured."""

    async def sync(self, account_id: int) -> None:
        logger.debug(f"No sync engine configured; skipping sync for account {account_id}")


class HttpSyncEngine:
    """
    Client for an external sync engine.

    Issues POST {base_url}/accounts/{account_id}/sync and waits for the
    engine to finish. Any non-2xx reply raises httpx.HTTPStatusError.

    One AsyncClient is opened per engine and shared by every request, so
    connections to the sync engine are pooled. Call aclose() at shutdown.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = SYNC_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def sync(self, account_id: int) -> None:
        response = await self.client.post(f"/accounts/{account_id}/sync")
        response.raise_for_status()

    async def aclose(self) -> None:
        await self.client.aclose()


def build_sync_engine() -> SyncEngine:
    """Pick the sync engine from the environment."""
    base_url = os.getenv("SYNC_SERVICE_URL", "").strip()
    if not base_url:
        logger.warning("SYNC_SERVICE_URL is not set - sync-and-list will serve stored emails only")
        return NoopSyncEngine()
    return HttpSyncEngine(base_url, token=os.getenv("SYNC_SERVICE_TOKEN") or None)


async def trigger_sync(
    sync_engine: SyncEngine,
    account_id: int,
    timeout: float = SYNC_TIMEOUT_SECONDS,
) -> None:
    """
    Run one sync and wait for it to finish, ignoring the outcome.

    A failed or timed-out sync is logged and swallowed so the caller still
    gets the last stored state of the mailbox. Cancellation is not an
    Exception and propagates to the caller.
    """
    try:
        await asyncio.wait_for(sync_engine.sync(account_id), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Sync for account {account_id} timed out after {timeout}s; listing stored emails")
    except Exception as e:
        logger.warning(f"Sync for account {account_id} failed: {e}; listing stored emails")
