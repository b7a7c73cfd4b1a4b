"""
Listing service for managing listings with ownership and status rules.
Handles CRUD operations, filtered search, moderation status and image records.
"""

from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.config import settings
from app.database import AsyncSessionLocal
from app.repositories.listing import ListingRepository, ListingSearchFilters, SORT_COLUMNS
from app.repositories.image import ImageRepository
from app.models.listing import Listing, ListingStatus, dump_json_text
from app.models.image import ListingImage
from app.schemas.auth import AuthIdentity
from app.schemas.listing import ListingCreate, ListingUpdate
from app.schemas.image import ListingImageCreate
from app.utils.exceptions import (
    APIException,
    BadRequestError,
    ListingNotFoundError,
    ImageNotFoundError,
    ListingOwnershipError,
    ListingStatusError
)
import math
import uuid
import logging

logger = logging.getLogger(__name__)

LOCALIZED_FIELDS = ("title", "description")

# Allowed moderation transitions, checked only when enforcement is enabled
STATUS_TRANSITIONS = {
    ListingStatus.DRAFT: {ListingStatus.PENDING, ListingStatus.ACTIVE, ListingStatus.ARCHIVED},
    ListingStatus.PENDING: {ListingStatus.ACTIVE, ListingStatus.REJECTED, ListingStatus.ARCHIVED},
    ListingStatus.ACTIVE: {ListingStatus.SOLD, ListingStatus.RENTED, ListingStatus.ARCHIVED},
    ListingStatus.SOLD: {ListingStatus.ACTIVE, ListingStatus.ARCHIVED},
    ListingStatus.RENTED: {ListingStatus.ACTIVE, ListingStatus.ARCHIVED},
    ListingStatus.ARCHIVED: set(),
    ListingStatus.REJECTED: set(),
}


def build_pagination_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    """Pagination metadata; an empty result has zero pages."""
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def normalize_pagination(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    """Clamp page to at least 1 and limit into [1, max_page_size]."""
    page = page if page is not None else 1
    limit = limit if limit is not None else settings.default_page_size
    return max(page, 1), min(max(limit, 1), settings.max_page_size)


async def record_listing_view(
    listing_id: uuid.UUID,
    session_factory: async_sessionmaker = AsyncSessionLocal
) -> None:
    """
    Increment a listing's view counter in its own session.
    Runs after the response is sent; failures are logged and dropped.
    """
    try:
        async with session_factory() as session:
            await ListingRepository(session).increment_view_count(listing_id)
    except Exception as e:
        logger.error(f"Failed to increment view count for listing {listing_id}: {e}")


class ListingService:
    """
    Listing service implementing the marketplace rules.
    Owners manage their own listings; ADMIN bypasses ownership checks.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.image_repo = ImageRepository(db_session)

    async def create_listing(self, listing_data: ListingCreate, owner: AuthIdentity) -> Listing:
        """
        Create a listing owned by the requester.
        Status is always DRAFT regardless of the payload.

        Raises:
            BadRequestError: If the listing could not be stored
        """
        try:
            create_data = listing_data.model_dump(exclude={"title", "description", "features", "currency"})
            create_data.update(
                owner_id=owner.id,
                status=ListingStatus.DRAFT,
                title=dump_json_text(listing_data.title.model_dump(exclude_unset=True)),
                description=dump_json_text(listing_data.description.model_dump(exclude_unset=True)),
                features=dump_json_text(listing_data.features),
                currency=listing_data.currency or settings.default_currency,
            )

            listing = await self.listing_repo.create_listing(create_data)

            logger.info(f"Listing created by user {owner.email}: {listing.id}")
            return listing

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create listing for user {owner.id}: {e}")
            raise BadRequestError("Failed to create listing")

    async def list_listings(
        self,
        filters: ListingSearchFilters,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc"
    ) -> Tuple[List[Listing], Dict[str, int]]:
        """
        Filtered, sorted, paginated listing search.

        Returns:
            Tuple of (listings on the requested page, pagination meta)
        """
        if sort_by not in SORT_COLUMNS:
            raise BadRequestError(f"Unsupported sort field: {sort_by}")

        page, limit = normalize_pagination(page, limit)
        skip = (page - 1) * limit

        listings, total = await self.listing_repo.search_listings(
            filters,
            skip=skip,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order
        )

        return listings, build_pagination_meta(total, page, limit)

    async def get_listing(self, listing_id: uuid.UUID) -> Listing:
        """
        Get listing with owner and images.

        Raises:
            ListingNotFoundError: If listing doesn't exist
        """
        listing = await self.listing_repo.get_listing_with_details(listing_id)

        if not listing:
            raise ListingNotFoundError()

        return listing

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        listing_data: ListingUpdate,
        requester: AuthIdentity
    ) -> Listing:
        """
        Apply a partial update. Fields absent from the payload are untouched.

        Raises:
            ListingNotFoundError: If listing doesn't exist
            ListingOwnershipError: If requester is neither owner nor admin
        """
        try:
            listing = await self.get_listing(listing_id)
            self._check_ownership(listing.owner_id, requester, "update this listing")

            changes = self._serialize_changes(listing_data)
            if not changes:
                return listing

            updated = await self.listing_repo.update_listing(listing, changes)

            logger.info(f"Listing {listing_id} updated by user {requester.email}: {sorted(changes)}")
            return updated

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update listing {listing_id}: {e}")
            raise BadRequestError("Failed to update listing")

    async def delete_listing(self, listing_id: uuid.UUID, requester: AuthIdentity) -> None:
        """
        Delete a listing and, by cascade, its images.

        Raises:
            ListingNotFoundError: If listing doesn't exist
            ListingOwnershipError: If requester is neither owner nor admin
        """
        listing = await self.get_listing(listing_id)
        self._check_ownership(listing.owner_id, requester, "delete this listing")

        await self.listing_repo.delete(listing)
        logger.info(f"Listing {listing_id} deleted by user {requester.email}")

    async def update_status(self, listing_id: uuid.UUID, status: ListingStatus) -> Listing:
        """
        Change moderation status.
        published_at is stamped on the first transition to ACTIVE only.

        Raises:
            ListingNotFoundError: If listing doesn't exist
            ListingStatusError: If transition enforcement is on and the move is not allowed
        """
        listing = await self.get_listing(listing_id)
        current = listing.status

        if settings.enforce_status_transitions and current != status:
            if status not in STATUS_TRANSITIONS[current]:
                raise ListingStatusError(current.value, status.value)

        changes: Dict[str, Any] = {"status": status}
        if status == ListingStatus.ACTIVE and listing.published_at is None:
            changes["published_at"] = datetime.now(timezone.utc)

        updated = await self.listing_repo.update_listing(listing, changes)

        logger.info(f"Listing {listing_id} status changed: {current.value} -> {status.value}")
        return updated

    async def upload_image(
        self,
        listing_id: uuid.UUID,
        image_data: ListingImageCreate,
        requester: AuthIdentity
    ) -> ListingImage:
        """
        Attach an image record to a listing.
        Ownership is only checked when restrict_image_upload_to_owner is enabled.

        Raises:
            ListingNotFoundError: If listing doesn't exist
        """
        owner_id = await self.listing_repo.get_owner_id(listing_id)
        if owner_id is None:
            raise ListingNotFoundError()

        if settings.restrict_image_upload_to_owner:
            self._check_ownership(owner_id, requester, "add images to this listing")

        image = await self.image_repo.add_image(listing_id, image_data.model_dump())

        logger.info(f"Image {image.id} added to listing {listing_id} by user {requester.email}")
        return image

    async def delete_image(self, image_id: uuid.UUID, requester: AuthIdentity) -> None:
        """
        Remove an image record.

        Raises:
            ImageNotFoundError: If image doesn't exist
            ListingOwnershipError: If requester does not own the parent listing and is not admin
        """
        image = await self.image_repo.get_by_id(image_id)
        if not image:
            raise ImageNotFoundError()

        owner_id = await self.image_repo.get_listing_owner_id(image_id)
        self._check_ownership(owner_id, requester, "delete this image")

        await self.image_repo.delete(image)
        logger.info(f"Image {image_id} deleted by user {requester.email}")

    def _check_ownership(self, owner_id: Optional[uuid.UUID], requester: AuthIdentity, action: str) -> None:
        if requester.is_admin:
            return
        if owner_id != requester.id:
            logger.warning(f"User {requester.email} denied: {action}")
            raise ListingOwnershipError(action)

    def _serialize_changes(self, listing_data: ListingUpdate) -> Dict[str, Any]:
        """Convert a partial update into column values, serializing JSON text fields."""
        changes = listing_data.model_dump(exclude_unset=True, exclude=set(LOCALIZED_FIELDS))

        for field in LOCALIZED_FIELDS:
            if field in listing_data.model_fields_set:
                value = getattr(listing_data, field)
                changes[field] = dump_json_text(value.model_dump(exclude_unset=True))

        if "features" in changes:
            changes["features"] = dump_json_text(changes["features"])

        return changes
