"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.guest_sites import router as guest_sites_router

__all__ = [
    "guest_sites_router",
]
