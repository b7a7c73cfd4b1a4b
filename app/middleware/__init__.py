"""
Middleware package for the Real Estate Listings API.
Provides request ids, request size validation and request logging.
"""

from .validation import ValidationMiddleware

__all__ = [
    "ValidationMiddleware"
]
