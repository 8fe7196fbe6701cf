from __future__ import annotations

import os

from supabase import Client, create_client

from src.infrastructure.logging import get_logger

logger = get_logger("database.supabase")

# Shared client for all repositories
_CLIENT_SINGLETON: Client | None = None


def supabase_enabled() -> bool:
    """True when hosted Supabase storage is configured and not switched off."""
    if os.getenv("SUPABASE_DISABLED", "0") == "1":
        return False
    return bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_ANON_KEY"))


def get_supabase_client() -> Client | None:
    global _CLIENT_SINGLETON
    if not supabase_enabled():
        return None
    if _CLIENT_SINGLETON is None:
        url = os.environ["SUPABASE_URL"]
        _CLIENT_SINGLETON = create_client(url, os.environ["SUPABASE_ANON_KEY"])
        logger.info("supabase_client_created", url=url)
    return _CLIENT_SINGLETON
