"""
API route handlers for the Real Estate Listings API.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .listings import router as listings_router

__all__ = ["auth_router", "listings_router"]
