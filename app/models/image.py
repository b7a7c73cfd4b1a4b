"""
ListingImage model for images attached to a listing.
Images are URL records; the files themselves live outside this service.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from app.models.listing import Listing


class ListingImage(Base):
    """
    Image record belonging to a listing, ordered by display order.
    Several images may share the same order value.
    """

    __tablename__ = "listing_images"

    # Listing relationship
    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the listing this image belongs to"
    )

    url: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        comment="Public URL of the image"
    )

    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Display order for the image gallery"
    )

    # Relationships
    listing: Mapped["Listing"] = relationship(
        "Listing",
        back_populates="images",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        """String representation of the listing image."""
        return f"<ListingImage(id={self.id}, listing_id={self.listing_id}, order={self.order})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "listing_id": str(self.listing_id),
            "url": self.url,
            "thumbnail_url": self.thumbnail_url,
            "caption": self.caption,
            "order": self.order,
            "created_at": self.created_at,
        }


# Gallery lookups are always by listing in display order
listing_images_order_index = Index(
    'idx_listing_images_listing_order',
    ListingImage.listing_id,
    ListingImage.order.asc()
)
