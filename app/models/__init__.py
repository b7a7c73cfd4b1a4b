"""
Database models for the Real Estate Listings API.
Includes User, Listing, and ListingImage models with their enumerations.
"""

from app.models.user import User, UserRole, UserStatus
from app.models.listing import Listing, PropertyType, DealType, ListingStatus
from app.models.image import ListingImage

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Listing",
    "PropertyType",
    "DealType",
    "ListingStatus",
    "ListingImage",
]
