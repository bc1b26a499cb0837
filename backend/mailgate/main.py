"""
Mailgate Backend API
FastAPI application for credential-gated public email lookup.
"""

import logging
import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mailgate.db import create_supabase_admin
from mailgate.errors import InvalidRequest, PublicMailError
from mailgate.routers import public_emails
from mailgate.services.account_store import ACCOUNTS_TABLE, SupabaseAccountStore
from mailgate.services.email_query import SupabaseEmailQueryService
from mailgate.services.public_mail import PublicMailService
from mailgate.services.sync import build_sync_engine

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mailgate API",
    description="Public email lookup authenticated by mail account credentials",
    version="0.1.0",
)


def get_cors_origins() -> List[str]:
    """The mail page dev server plus any comma-separated CORS_ORIGINS, deduplicated."""
    extra = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
    return list(dict.fromkeys(["http://localhost:3000"] + extra))


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(public_emails.router, prefix="/api/v1/public/emails", tags=["public-emails"])


# ---------------------------------------------------------------------------
# Error envelopes
# ---------------------------------------------------------------------------

@app.exception_handler(PublicMailError)
async def public_mail_error_handler(request: Request, exc: PublicMailError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, **exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Only location and message are echoed back; request bodies carry passwords
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return await public_mail_error_handler(request, InvalidRequest(errors=errors))


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

@app.on_event("startup")
async def init_public_mail_service() -> None:
    """
    Create the Supabase client and wire the public mail service.

    A missing Supabase configuration is logged, not raised, so /health still
    answers; the lookup endpoints then return UPSTREAM_FAILURE.
    """
    try:
        supabase_admin = await create_supabase_admin()
    except Exception as exc:
        logger.error(f"Supabase client unavailable: {exc}")
        app.state.supabase_admin = None
        app.state.public_mail_service = None
        return

    app.state.supabase_admin = supabase_admin
    app.state.public_mail_service = PublicMailService(
        account_store=SupabaseAccountStore(supabase_admin),
        email_service=SupabaseEmailQueryService(supabase_admin),
        sync_engine=build_sync_engine(),
    )
    logger.info(
        "Mailgate API running at http://localhost:%s",
        os.getenv("HOST_PORT", "8000"),
    )


@app.on_event("shutdown")
async def close_public_mail_service() -> None:
    """Release the sync engine's pooled HTTP connections."""
    service = getattr(app.state, "public_mail_service", None)
    aclose = getattr(getattr(service, "sync_engine", None), "aclose", None)
    if aclose is not None:
        await aclose()


# ---------------------------------------------------------------------------
# Liveness
# ---------------------------------------------------------------------------

@app.get("/")
async def root():
    return {"service": app.title, "version": app.version, "docs": app.docs_url}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/db")
async def health_db():
    """Round-trip one email_accounts id through Supabase; 503 if that fails."""
    supabase_admin = getattr(app.state, "supabase_admin", None)
    if supabase_admin is None:
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "not configured"})

    try:
        await supabase_admin.table(ACCOUNTS_TABLE).select("id").limit(1).execute()
    except Exception as exc:
        # Driver messages can include the project URL; keep them in the log
        logger.error(f"Database health check failed: {exc}")
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "unreachable"})
    return {"status": "ok", "database": "reachable"}
