from supabase import create_client, acreate_client, Client, AsyncClient
from app.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None
    _async_client: AsyncClient = None
    _service_key_warned = False

    @classmethod
    def get_client(cls) -> Client:
        """Anon-key client, used for Supabase Auth only"""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. All table and storage access from the API goes through it."""
        if cls._service_client is None:
            if not settings.supabase_service_role_key:
                if not cls._service_key_warned:
                    logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; table access falls back to the anon key and RLS")
                    cls._service_key_warned = True
                return cls.get_client()
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client

    @classmethod
    async def get_async_client(cls) -> AsyncClient:
        """Async client; the only one that can open realtime channels."""
        if cls._async_client is None:
            key = settings.supabase_service_role_key or settings.supabase_key
            cls._async_client = await acreate_client(settings.supabase_url, key)
        return cls._async_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None
        cls._async_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


async def get_async_supabase() -> AsyncClient:
    return await SupabaseClient.get_async_client()
