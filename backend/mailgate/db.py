"""
Database client configuration.
Uses Supabase (PostgREST) for the email_accounts and emails tables.
"""

import os

from dotenv import load_dotenv
from supabase import AsyncClient, acreate_client

load_dotenv()


async def create_supabase_admin() -> AsyncClient:
    """
    Create the service-role client used for account and email lookups.

    Public lookups carry no Supabase JWT, so the service key is required:
    with the anon key RLS would hide every row.
    """
    supabase_url = os.getenv("SUPABASE_URL")
    supabase_service_key = os.getenv("SUPABASE_SERVICE_KEY")

    if not supabase_url or not supabase_service_key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set in environment variables")

    return await acreate_client(supabase_url, supabase_service_key)
