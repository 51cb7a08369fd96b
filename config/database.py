"""
Database connection management.

Provides the Supabase client singleton used by the repository adapter.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)

class ConnectionError(Exception):
    """Failed to connect to database."""
    pass

@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If the client cannot be created
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", status="success")
        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()

        sites = client.table("guest_blog_sites").select("id", count="exact").limit(1).execute()
        publishers = client.table("publishers").select("id", count="exact").limit(1).execute()

        return {
            "status": "healthy",
            "sites_count": sites.count,
            "publishers_count": publishers.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }

def reset_connection():
    """Reset the cached database connection."""
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
