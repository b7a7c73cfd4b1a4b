"""
Pydantic schemas for listing image requests and responses.
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
from app.schemas.common import CamelModel


class ListingImageCreate(CamelModel):
    """Schema for attaching an image URL to a listing."""

    url: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Public URL of the image",
        examples=["https://cdn.example.com/listings/1.jpg"]
    )

    order: int = Field(
        0,
        ge=0,
        description="Display order in the gallery",
        examples=[0]
    )

    thumbnail_url: Optional[str] = Field(None, max_length=1000)
    caption: Optional[str] = Field(None, max_length=500)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        """Reject blank URLs."""
        if not v.strip():
            raise ValueError("Image URL cannot be empty")
        return v.strip()


class ListingImageResponse(CamelModel):
    """Schema for listing image responses."""

    id: str = Field(..., description="Unique image identifier")
    listing_id: str = Field(..., description="ID of the listing this image belongs to")
    url: str
    thumbnail_url: Optional[str] = None
    caption: Optional[str] = None
    order: int
    created_at: datetime
