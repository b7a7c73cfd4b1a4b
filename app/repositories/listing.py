"""
Listing repository for managing listings with filtering, sorting and pagination.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func, update, desc, asc
from sqlalchemy.orm import selectinload
from app.repositories.base import BaseRepository
from app.models.listing import Listing, ListingStatus, PropertyType, DealType
from typing import Optional, List, Dict, Any, Tuple
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)

# Public sort keys mapped to columns
SORT_COLUMNS = {
    "createdAt": Listing.created_at,
    "updatedAt": Listing.updated_at,
    "publishedAt": Listing.published_at,
    "price": Listing.price,
    "area": Listing.area,
    "viewCount": Listing.view_count,
}


class ListingSearchFilters:
    """Data class for listing search filters. All criteria are combined with AND."""

    def __init__(
        self,
        status: Optional[ListingStatus] = ListingStatus.ACTIVE,
        property_type: Optional[PropertyType] = None,
        deal_type: Optional[DealType] = None,
        city: Optional[str] = None,
        district: Optional[str] = None,
        owner_id: Optional[uuid.UUID] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_rooms: Optional[int] = None,
        max_rooms: Optional[int] = None,
        min_area: Optional[float] = None,
        max_area: Optional[float] = None,
    ):
        self.status = status
        self.property_type = property_type
        self.deal_type = deal_type
        self.city = city
        self.district = district
        self.owner_id = owner_id
        self.min_price = min_price
        self.max_price = max_price
        self.min_rooms = min_rooms
        self.max_rooms = max_rooms
        self.min_area = min_area
        self.max_area = max_area


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listings.
    Owner and images are loaded with every listing.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def create_listing(self, listing_data: Dict[str, Any]) -> Listing:
        """
        Create a new listing.

        Args:
            listing_data: Column values, with localized text already serialized

        Returns:
            Created listing with owner and images loaded
        """
        try:
            created_listing = await self.create(listing_data)
            logger.info(f"Created listing {created_listing.id} for owner {created_listing.owner_id}")
            return await self.get_listing_with_details(created_listing.id)
        except Exception as e:
            logger.error(f"Failed to create listing: {e}")
            raise

    async def get_listing_with_details(self, listing_id: uuid.UUID) -> Optional[Listing]:
        """
        Get listing with owner and images freshly loaded.

        Returns:
            Listing with loaded relationships or None if not found
        """
        try:
            query = (
                select(Listing)
                .options(
                    selectinload(Listing.owner),
                    selectinload(Listing.images)
                )
                .where(Listing.id == listing_id)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            listing = result.scalar_one_or_none()

            if listing:
                logger.debug(f"Retrieved listing with details: {listing_id}")

            return listing
        except Exception as e:
            logger.error(f"Failed to get listing with details {listing_id}: {e}")
            raise

    async def get_owner_id(self, listing_id: uuid.UUID) -> Optional[uuid.UUID]:
        """Return only the owner id of a listing, or None if it does not exist."""
        try:
            result = await self.db.execute(select(Listing.owner_id).where(Listing.id == listing_id))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get owner of listing {listing_id}: {e}")
            raise

    async def search_listings(
        self,
        filters: ListingSearchFilters,
        skip: int = 0,
        limit: int = 20,
        sort_by: str = "createdAt",
        sort_order: str = "desc"
    ) -> Tuple[List[Listing], int]:
        """
        Search listings with filtering and pagination.

        Args:
            filters: ListingSearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
            sort_by: Public sort key, one of SORT_COLUMNS
            sort_order: 'asc' or 'desc'

        Returns:
            Tuple of (listings list, total count)
        """
        try:
            query = (
                select(Listing)
                .options(
                    selectinload(Listing.owner),
                    selectinload(Listing.images)
                )
            )

            count_query = select(func.count(Listing.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            order_field = SORT_COLUMNS.get(sort_by, Listing.created_at)
            direction = desc if sort_order.lower() == "desc" else asc
            query = query.order_by(direction(order_field), direction(Listing.id))

            query = query.offset(skip).limit(limit)

            result = await self.db.execute(query)
            listings = result.scalars().all()

            logger.debug(f"Listing search returned {len(listings)} of {total_count} total results")
            return list(listings), total_count
        except Exception as e:
            logger.error(f"Failed to search listings: {e}")
            raise

    def _build_filter_conditions(self, filters: ListingSearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.
        Exact matches for categorical fields, inclusive bounds for ranges.
        """
        conditions = []

        if filters.status is not None:
            conditions.append(Listing.status == filters.status)

        if filters.property_type is not None:
            conditions.append(Listing.property_type == filters.property_type)
        if filters.deal_type is not None:
            conditions.append(Listing.deal_type == filters.deal_type)
        if filters.city:
            conditions.append(Listing.city == filters.city)
        if filters.district:
            conditions.append(Listing.district == filters.district)
        if filters.owner_id:
            conditions.append(Listing.owner_id == filters.owner_id)

        # Price range filters
        if filters.min_price is not None:
            conditions.append(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Listing.price <= filters.max_price)

        # Room range filters
        if filters.min_rooms is not None:
            conditions.append(Listing.rooms >= filters.min_rooms)
        if filters.max_rooms is not None:
            conditions.append(Listing.rooms <= filters.max_rooms)

        # Area range filters
        if filters.min_area is not None:
            conditions.append(Listing.area >= filters.min_area)
        if filters.max_area is not None:
            conditions.append(Listing.area <= filters.max_area)

        return conditions

    async def update_listing(self, listing: Listing, changes: Dict[str, Any]) -> Listing:
        """Persist changes and return the listing with relationships reloaded."""
        await self.update(listing, changes)
        return await self.get_listing_with_details(listing.id)

    async def increment_view_count(self, listing_id: uuid.UUID) -> None:
        """
        Atomically increment the view counter.
        Runs as a single UPDATE so concurrent views are not lost.
        """
        try:
            stmt = (
                update(Listing)
                .where(Listing.id == listing_id)
                .values(view_count=Listing.view_count + 1)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(stmt)
            await self.db.commit()
            logger.debug(f"Incremented view count for listing {listing_id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to increment view count for listing {listing_id}: {e}")
            raise
