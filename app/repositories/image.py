"""
Repository for ListingImage model operations.
Handles database queries and operations for listing images.
"""

import uuid
from typing import Optional, Dict, Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.image import ListingImage
from app.models.listing import Listing
from app.repositories.base import BaseRepository


class ImageRepository(BaseRepository[ListingImage]):
    """Repository for ListingImage database operations."""

    def __init__(self, db_session: AsyncSession):
        super().__init__(ListingImage, db_session)

    async def add_image(self, listing_id: uuid.UUID, image_data: Dict[str, Any]) -> ListingImage:
        """Attach a new image record to a listing."""
        return await self.create({**image_data, "listing_id": listing_id})

    async def get_listing_owner_id(self, image_id: uuid.UUID) -> Optional[uuid.UUID]:
        """
        Resolve the owner of the listing an image belongs to.

        Returns:
            Owner id, or None if the image does not exist
        """
        query = (
            select(Listing.owner_id)
            .join(ListingImage, ListingImage.listing_id == Listing.id)
            .where(ListingImage.id == image_id)
        )

        result = await self.db.execute(query)
        return result.scalar_one_or_none()
