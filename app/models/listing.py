"""
Listing model for sale and rental real-estate offers.
Localized title/description and the features map are stored as JSON text.
"""

from sqlalchemy import (
    String, Text, Integer, Numeric, Float, DateTime, Enum as SQLEnum, Index, ForeignKey, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from datetime import datetime
from decimal import Decimal
import enum
import json
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.image import ListingImage


class PropertyType(str, enum.Enum):
    """Kind of real estate being offered."""
    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    TOWNHOUSE = "TOWNHOUSE"
    COMMERCIAL = "COMMERCIAL"
    LAND = "LAND"
    GARAGE = "GARAGE"


class DealType(str, enum.Enum):
    """Kind of transaction being offered."""
    SALE = "SALE"
    RENT = "RENT"
    DAILY_RENT = "DAILY_RENT"


class ListingStatus(str, enum.Enum):
    """Moderation and lifecycle status of a listing."""
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    RENTED = "RENTED"
    ARCHIVED = "ARCHIVED"
    REJECTED = "REJECTED"


def dump_json_text(value: Optional[Dict[str, Any]]) -> Optional[str]:
    """Serialize a localized-text or features map for storage."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def load_json_text(value: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse a stored JSON text column back into a map."""
    if value is None or value == "":
        return None
    return json.loads(value)


class Listing(Base):
    """
    Listing model for managing property offers.
    Owned by a user; images cascade with the listing.
    """

    __tablename__ = "listings"

    # Ownership
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    # Classification
    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType),
        nullable=False,
        index=True,
    )

    deal_type: Mapped[DealType] = mapped_column(
        SQLEnum(DealType),
        nullable=False,
        index=True,
    )

    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus),
        nullable=False,
        default=ListingStatus.DRAFT,
        index=True,
    )

    # Localized content, serialized JSON
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Localized title as JSON text"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Localized description as JSON text"
    )

    # Location information
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Pricing information
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        index=True,
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="UZS")

    # Property specifications
    area: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_floors: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    features: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-form features map as JSON text"
    )

    # Counters
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    favorite_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set once, on the first transition to ACTIVE"
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="listings",
        lazy="selectin"
    )

    images: Mapped[List["ListingImage"]] = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="ListingImage.order.asc()"
    )

    def __repr__(self) -> str:
        """String representation of the listing."""
        return f"<Listing(id={self.id}, city={self.city}, status={self.status})>"

    @property
    def title_map(self) -> Dict[str, Any]:
        return load_json_text(self.title) or {}

    @property
    def description_map(self) -> Dict[str, Any]:
        return load_json_text(self.description) or {}

    @property
    def features_map(self) -> Optional[Dict[str, Any]]:
        return load_json_text(self.features)

    def to_dict(self, include_owner: bool = True, include_images: bool = True) -> dict:
        """
        Convert listing to dictionary with JSON text columns parsed.

        Args:
            include_owner: Whether to include the owner summary
            include_images: Whether to include images ordered by display order

        Returns:
            Dictionary representation of listing
        """
        result = {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "property_type": self.property_type.value,
            "deal_type": self.deal_type.value,
            "status": self.status.value,
            "title": self.title_map,
            "description": self.description_map,
            "city": self.city,
            "district": self.district,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "price": float(self.price),
            "currency": self.currency,
            "area": self.area,
            "rooms": self.rooms,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "floor": self.floor,
            "total_floors": self.total_floors,
            "features": self.features_map,
            "view_count": self.view_count,
            "favorite_count": self.favorite_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "published_at": self.published_at,
        }

        if include_owner and self.owner is not None:
            result["owner"] = self.owner.to_owner_dict()

        if include_images:
            result["images"] = [image.to_dict() for image in self.images]

        return result


# Composite indexes for the public search page
city_status_index = Index(
    'idx_listings_city_status_price',
    Listing.city,
    Listing.status,
    Listing.price
)

type_deal_index = Index(
    'idx_listings_type_deal_status',
    Listing.property_type,
    Listing.deal_type,
    Listing.status
)

owner_status_index = Index(
    'idx_listings_owner_status',
    Listing.owner_id,
    Listing.status
)
