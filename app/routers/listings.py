"""
Listing API endpoints for CRUD, search, moderation status and images.
Provides listing management with authentication, role and ownership guards.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from typing import Optional
from uuid import UUID
from decimal import Decimal

from app.models.listing import Listing, ListingStatus, PropertyType, DealType
from app.models.user import UserRole
from app.repositories.listing import ListingSearchFilters
from app.services.listing import ListingService, record_listing_view
from app.schemas.auth import AuthIdentity
from app.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingStatusUpdate,
    ListingResponse,
    ListingListResponse,
    PaginationMeta
)
from app.schemas.image import ListingImageCreate, ListingImageResponse
from app.utils.dependencies import (
    get_current_identity,
    get_listing_service,
    require_listing_ownership,
    require_roles
)
from app.schemas.error import get_crud_error_responses, get_error_responses


router = APIRouter(prefix="/listings", tags=["Listings"])

SORT_PATTERN = r"^(createdAt|updatedAt|publishedAt|price|area|viewCount)$"


def _to_response(listing: Listing) -> ListingResponse:
    return ListingResponse.model_validate(listing.to_dict())


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="Create a listing owned by the caller. New listings always start as DRAFT.",
    responses=get_error_responses(401, 422)
)
async def create_listing(
    listing_data: ListingCreate,
    identity: AuthIdentity = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Create a new listing.

    Returns:
        Created listing with owner and (empty) images
    """
    listing = await listing_service.create_listing(listing_data, identity)
    return _to_response(listing)


@router.get(
    "",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search listings",
    description="Paginated listing search. Status defaults to ACTIVE when not given."
)
async def list_listings(
    # Categorical filters
    listing_status: Optional[ListingStatus] = Query(None, alias="status", description="Listing status (default ACTIVE)"),
    property_type: Optional[PropertyType] = Query(None, alias="propertyType"),
    deal_type: Optional[DealType] = Query(None, alias="dealType"),
    city: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
    owner_id: Optional[UUID] = Query(None, alias="ownerId"),

    # Range filters, inclusive
    min_price: Optional[Decimal] = Query(None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice"),
    min_rooms: Optional[int] = Query(None, alias="minRooms"),
    max_rooms: Optional[int] = Query(None, alias="maxRooms"),
    min_area: Optional[float] = Query(None, alias="minArea"),
    max_area: Optional[float] = Query(None, alias="maxArea"),

    # Pagination, clamped rather than rejected
    page: Optional[int] = Query(None, description="Page number (starts from 1)"),
    limit: Optional[int] = Query(None, description="Page size, at most 100"),

    # Sorting
    sort_by: str = Query("createdAt", alias="sortBy", pattern=SORT_PATTERN),
    sort_order: str = Query("desc", alias="sortOrder", pattern=r"^(asc|desc)$"),

    listing_service: ListingService = Depends(get_listing_service)
) -> ListingListResponse:
    """
    Get paginated list of listings.

    Returns:
        {data, meta} with meta.totalPages = ceil(total / limit)
    """
    filters = ListingSearchFilters(
        status=listing_status or ListingStatus.ACTIVE,
        property_type=property_type,
        deal_type=deal_type,
        city=city,
        district=district,
        owner_id=owner_id,
        min_price=min_price,
        max_price=max_price,
        min_rooms=min_rooms,
        max_rooms=max_rooms,
        min_area=min_area,
        max_area=max_area,
    )

    listings, meta = await listing_service.list_listings(
        filters,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order
    )

    return ListingListResponse(
        data=[_to_response(listing) for listing in listings],
        meta=PaginationMeta(**meta)
    )


@router.delete(
    "/images/{image_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete listing image",
    description="Remove an image. Only the listing owner or an admin may do this.",
    responses=get_crud_error_responses()
)
async def delete_image(
    image_id: UUID,
    identity: AuthIdentity = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> Response:
    """Delete an image record."""
    await listing_service.delete_image(image_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing",
    description="Get a single listing. The view counter is incremented after the response.",
    responses=get_error_responses(404)
)
async def get_listing(
    id: UUID,
    background_tasks: BackgroundTasks,
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Get listing by ID.
    The returned viewCount does not yet include this view.
    """
    listing = await listing_service.get_listing(id)
    background_tasks.add_task(record_listing_view, listing.id)
    return _to_response(listing)


@router.patch(
    "/{id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Update listing",
    description="Partial update. Only the owner or an admin may update.",
    responses=get_crud_error_responses()
)
async def update_listing(
    id: UUID,
    listing_data: ListingUpdate,
    identity: AuthIdentity = Depends(require_listing_ownership),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """Apply only the fields present in the request body."""
    listing = await listing_service.update_listing(id, listing_data, identity)
    return _to_response(listing)


@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete listing",
    description="Delete a listing and its images. Only the owner or an admin may delete.",
    responses=get_crud_error_responses()
)
async def delete_listing(
    id: UUID,
    identity: AuthIdentity = Depends(require_listing_ownership),
    listing_service: ListingService = Depends(get_listing_service)
) -> Response:
    """Delete listing."""
    await listing_service.delete_listing(id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{id}/status",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Change listing status",
    description="Moderation endpoint, ADMIN only. publishedAt is set on the first move to ACTIVE.",
    responses=get_crud_error_responses()
)
async def update_listing_status(
    id: UUID,
    status_data: ListingStatusUpdate,
    identity: AuthIdentity = Depends(require_roles(UserRole.ADMIN)),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """Change listing status."""
    listing = await listing_service.update_status(id, status_data.status)
    return _to_response(listing)


@router.post(
    "/{id}/images",
    response_model=ListingImageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add listing image",
    description="Attach an image URL to a listing.",
    responses=get_crud_error_responses()
)
async def upload_image(
    id: UUID,
    image_data: ListingImageCreate,
    identity: AuthIdentity = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingImageResponse:
    """Attach an image record to the listing."""
    image = await listing_service.upload_image(id, image_data, identity)
    return ListingImageResponse.model_validate(image.to_dict())
