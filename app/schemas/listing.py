"""
Pydantic schemas for listing requests and responses.
Handles localized text, partial updates, status changes and paginated results.
"""

from pydantic import ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from app.models.listing import PropertyType, DealType, ListingStatus
from app.schemas.common import CamelModel
from app.schemas.image import ListingImageResponse
from app.schemas.user import OwnerSummary


class LocalizedText(CamelModel):
    """Text in the supported languages; every language is optional."""

    model_config = ConfigDict(extra="forbid")

    en: Optional[str] = None
    ru: Optional[str] = None
    uz: Optional[str] = None


class ListingBase(CamelModel):
    """Fields shared by listing create payloads."""

    property_type: PropertyType = Field(..., examples=["APARTMENT"])
    deal_type: DealType = Field(..., examples=["SALE"])

    title: LocalizedText = Field(
        ...,
        description="Localized title",
        examples=[{"en": "Bright 2-room flat", "ru": "Светлая двухкомнатная квартира"}]
    )
    description: LocalizedText = Field(..., description="Localized description")

    city: str = Field(..., min_length=1, max_length=100, examples=["Tashkent"])
    district: Optional[str] = Field(None, max_length=100, examples=["Yunusabad"])
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2, examples=[85000])
    currency: Optional[str] = Field(
        None,
        pattern=r"^[A-Z]{3}$",
        description="ISO currency code, defaults to UZS",
        examples=["UZS"]
    )

    area: Optional[float] = Field(None, ge=0, description="Area in square meters")
    rooms: Optional[int] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    floor: Optional[int] = Field(None, ge=0)
    total_floors: Optional[int] = Field(None, ge=0)

    features: Optional[Dict[str, Any]] = Field(
        None,
        description="Free-form feature map",
        examples=[{"parking": True, "balcony": 2}]
    )

    @field_validator('city')
    @classmethod
    def validate_city(cls, v):
        """Validate and clean city."""
        if not v or not v.strip():
            raise ValueError("City cannot be empty")
        return v.strip()


class ListingCreate(ListingBase):
    """
    Schema for creating a listing.
    New listings always start as DRAFT; any submitted status is ignored.
    """


# Fields whose columns are NOT NULL; an explicit null is not a valid update
REQUIRED_UPDATE_FIELDS = (
    "property_type", "deal_type", "title", "description", "city", "price", "currency",
)


class ListingUpdate(CamelModel):
    """
    Schema for partial listing updates.
    Only fields present in the request body are applied.
    """

    property_type: Optional[PropertyType] = None
    deal_type: Optional[DealType] = None
    title: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    currency: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")
    area: Optional[float] = Field(None, ge=0)
    rooms: Optional[int] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    floor: Optional[int] = Field(None, ge=0)
    total_floors: Optional[int] = Field(None, ge=0)
    features: Optional[Dict[str, Any]] = None

    @field_validator('city')
    @classmethod
    def validate_city(cls, v):
        """Validate and clean city."""
        if v is not None:
            if not v.strip():
                raise ValueError("City cannot be empty")
            return v.strip()
        return v

    @model_validator(mode='after')
    def reject_null_required_fields(self):
        """Required columns may be omitted but not cleared."""
        for field in REQUIRED_UPDATE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class ListingStatusUpdate(CamelModel):
    """Schema for moderation status changes."""

    status: ListingStatus = Field(..., examples=["ACTIVE"])


class ListingResponse(CamelModel):
    """Schema for listing responses with localized text parsed back into maps."""

    id: str = Field(..., description="Unique listing identifier")
    owner_id: str = Field(..., description="ID of the listing owner")
    property_type: PropertyType
    deal_type: DealType
    status: ListingStatus

    title: Dict[str, Optional[str]]
    description: Dict[str, Optional[str]]

    city: str
    district: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    price: float
    currency: str
    area: Optional[float] = None
    rooms: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    floor: Optional[int] = None
    total_floors: Optional[int] = None
    features: Optional[Dict[str, Any]] = None

    view_count: int = 0
    favorite_count: int = 0

    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime] = None

    owner: Optional[OwnerSummary] = None
    images: List[ListingImageResponse] = Field(default_factory=list)


class PaginationMeta(CamelModel):
    """Pagination metadata; total_pages is ceil(total / limit)."""

    total: int = Field(..., ge=0, examples=[150])
    page: int = Field(..., ge=1, examples=[1])
    limit: int = Field(..., ge=1, examples=[20])
    total_pages: int = Field(..., ge=0, examples=[8])


class ListingListResponse(CamelModel):
    """Schema for paginated listing results."""

    data: List[ListingResponse]
    meta: PaginationMeta
