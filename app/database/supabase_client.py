from supabase import create_client, Client
from supabase.client import ClientOptions
from app.config import settings


class SupabaseClient:
    _client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Shared anon client. Used for public reference data (courses, events)."""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def create_session_client(cls) -> Client:
        """Fresh client for one request; the caller installs the user's session from cookies."""
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(
                persist_session=False,
                auto_refresh_token=False,
                flow_type="pkce",
            ),
        )


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_session_supabase() -> Client:
    return SupabaseClient.create_session_client()
