"""
Persistence adapters.

Exports:
    MarketplaceRepository: Abstract repository port
    SupabaseRepository: Supabase-backed adapter
    get_repository: Shared adapter instance for the running app
"""

from typing import Optional

from repositories.base import MarketplaceRepository
from repositories.supabase_repository import SupabaseRepository

_repository: Optional[MarketplaceRepository] = None


def get_repository() -> MarketplaceRepository:
    """Get or create the Supabase-backed repository."""
    global _repository
    if _repository is None:
        from config.database import get_supabase_client
        _repository = SupabaseRepository(get_supabase_client())
    return _repository


__all__ = [
    "MarketplaceRepository",
    "SupabaseRepository",
    "get_repository",
]
