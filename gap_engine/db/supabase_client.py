"""Supabase client initialization."""

from functools import lru_cache

from supabase import Client, create_client

from gap_engine.core.config import Settings, get_settings
from gap_engine.core.errors import ConfigurationError


def create_supabase(settings: Settings) -> Client:
    """
    Build a Supabase client from settings.

    Raises:
        ConfigurationError: If the URL or key is missing, or the client cannot be built
    """
    missing = [
        name
        for name, value in (
            ("SUPABASE_URL", settings.SUPABASE_URL),
            ("SUPABASE_KEY", settings.SUPABASE_KEY),
        )
        if not value or not value.strip()
    ]
    if missing:
        raise ConfigurationError(f"Missing Supabase settings: {', '.join(missing)}")

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    except Exception as e:
        raise ConfigurationError(f"Failed to initialize Supabase client: {e}") from e


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get Supabase client instance (cached singleton).

    Returns:
        Supabase client configured from settings

    Raises:
        ConfigurationError: If client initialization fails
    """
    return create_supabase(get_settings())
