from supabase import acreate_client, AsyncClient
from profile_portal.config.settings import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Factory for Supabase clients.

    Auth state lives on the client, so each browser session gets its own
    client instead of sharing a process-wide singleton.
    """

    @classmethod
    async def create_session_client(cls) -> AsyncClient:
        if not settings.supabase_url or not settings.supabase_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be configured")
        client = await acreate_client(settings.supabase_url, settings.supabase_key)
        logger.debug("Created Supabase client for a new browser session")
        return client
