from supabase import create_client, Client, ClientOptions
from portal.config import settings
from typing import Callable


def _ephemeral_options() -> ClientOptions:
    # Per-request clients never keep or refresh a session of their own
    return ClientOptions(auto_refresh_token=False, persist_session=False)


class SupabaseClient:
    _service_client: Client = None

    @classmethod
    def get_service_client(cls) -> Client:
        """Process-wide client with the service_role key; bypasses RLS. Read-only after creation."""
        if cls._service_client is None:
            if not settings.supabase_url or not settings.supabase_service_role_key:
                raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be configured")
            cls._service_client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options=_ephemeral_options(),
            )
        return cls._service_client

    @classmethod
    def create_anon_client(cls) -> Client:
        """Fresh anon-key client, used for password sign-in so no session lands on the shared client."""
        return create_client(settings.supabase_url, settings.supabase_anon_key, options=_ephemeral_options())

    @classmethod
    def create_user_client(cls, access_token: str) -> Client:
        """Fresh client whose PostgREST requests run as the token's user (RLS applies)."""
        client = cls.create_anon_client()
        client.postgrest.auth(access_token)
        return client

    @classmethod
    def reset_client(cls):
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_anon_client_factory() -> Callable[[], Client]:
    return SupabaseClient.create_anon_client


def get_user_client_factory() -> Callable[[str], Client]:
    return SupabaseClient.create_user_client
