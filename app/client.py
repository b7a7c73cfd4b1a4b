"""
Typed async HTTP client for the Real Estate Listings API.
Shares request/response schemas with the server and keeps the session cookie.
"""

from typing import Any, Dict, Optional, Union
import uuid
import logging

import httpx

from app.models.listing import ListingStatus
from app.schemas.auth import AuthResponse, LoginRequest
from app.schemas.image import ListingImageCreate, ListingImageResponse
from app.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingStatusUpdate,
    ListingResponse,
    ListingListResponse
)
from app.schemas.user import UserCreate, ProfileUpdate, UserResponse
from app.utils.i18n import localize

logger = logging.getLogger(__name__)

Id = Union[str, uuid.UUID]

__all__ = ["ApiClientError", "ListingsAPIClient", "localize"]


class ApiClientError(Exception):
    """Raised for any non-2xx response or failed auth envelope."""

    def __init__(self, message: str, status_code: int, error: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error

    def __repr__(self) -> str:
        return f"ApiClientError(status_code={self.status_code}, message={self.message!r})"


class ListingsAPIClient:
    """
    Async client over httpx.AsyncClient.

    Usage:
        async with ListingsAPIClient("http://localhost:8000") as client:
            await client.login("buyer@example.com", "securepassword123")
            page = await client.list_listings(city="Tashkent")
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0
    ):
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ListingsAPIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        """
        Send a request and decode the JSON body.

        Returns:
            Decoded body, or None for 204 responses

        Raises:
            ApiClientError: For non-2xx responses
        """
        response = await self._client.request(method, path, json=json, params=params)

        if response.status_code == 204:
            return None

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message, error = self._extract_error(body, response)
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiClientError(message, response.status_code, error)

        return body

    @staticmethod
    def _extract_error(body: Any, response: httpx.Response):
        """Pull a message out of either error shape the server produces."""
        if isinstance(body, dict):
            if isinstance(body.get("error"), dict):
                return body["error"].get("message") or response.reason_phrase, body["error"]
            if "success" in body:
                return body.get("error") or body.get("message") or response.reason_phrase, body.get("error")
        return response.reason_phrase or "Request failed", body

    @staticmethod
    def _dump(model) -> Dict[str, Any]:
        return model.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def _envelope(self, body: Dict[str, Any], status_code: int = 200) -> AuthResponse:
        envelope = AuthResponse.model_validate(body)
        if not envelope.success:
            raise ApiClientError(envelope.error or envelope.message or "Request failed", status_code, envelope.error)
        return envelope

    # Auth

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None
    ) -> UserResponse:
        payload = UserCreate(
            email=email, password=password, first_name=first_name, last_name=last_name, phone=phone
        )
        body = await self._request("POST", "/auth/register", json=self._dump(payload))
        return self._envelope(body).data.user

    async def login(self, email: str, password: str) -> UserResponse:
        """Log in; the session cookie is kept by the underlying httpx client."""
        body = await self._request("POST", "/auth/login", json=self._dump(LoginRequest(email=email, password=password)))
        return self._envelope(body).data.user

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")
        self._client.cookies.clear()

    async def me(self) -> UserResponse:
        body = await self._request("GET", "/auth/me")
        return self._envelope(body).data.user

    async def update_profile(self, **fields: Optional[str]) -> UserResponse:
        payload = ProfileUpdate(**fields)
        body = await self._request("PATCH", "/auth/profile", json=self._dump(payload))
        return self._envelope(body).data.user

    # Listings

    async def create_listing(self, listing: Union[ListingCreate, Dict[str, Any]]) -> ListingResponse:
        if isinstance(listing, dict):
            listing = ListingCreate.model_validate(listing)
        body = await self._request("POST", "/listings", json=self._dump(listing))
        return ListingResponse.model_validate(body)

    async def list_listings(self, **params: Any) -> ListingListResponse:
        """
        Search listings. Keyword arguments are sent as query parameters
        using the server's names (status, propertyType, minPrice, page, ...).
        """
        query = {
            key: getattr(value, "value", value)
            for key, value in params.items()
            if value is not None
        }
        body = await self._request("GET", "/listings", params=query)
        return ListingListResponse.model_validate(body)

    async def get_listing(self, listing_id: Id) -> ListingResponse:
        body = await self._request("GET", f"/listings/{listing_id}")
        return ListingResponse.model_validate(body)

    async def update_listing(self, listing_id: Id, changes: Union[ListingUpdate, Dict[str, Any]]) -> ListingResponse:
        if isinstance(changes, dict):
            changes = ListingUpdate.model_validate(changes)
        body = await self._request("PATCH", f"/listings/{listing_id}", json=self._dump(changes))
        return ListingResponse.model_validate(body)

    async def delete_listing(self, listing_id: Id) -> None:
        await self._request("DELETE", f"/listings/{listing_id}")

    async def update_listing_status(self, listing_id: Id, status: ListingStatus) -> ListingResponse:
        payload = ListingStatusUpdate(status=status)
        body = await self._request("PATCH", f"/listings/{listing_id}/status", json=self._dump(payload))
        return ListingResponse.model_validate(body)

    async def upload_image(
        self,
        listing_id: Id,
        url: str,
        order: int = 0,
        thumbnail_url: Optional[str] = None,
        caption: Optional[str] = None
    ) -> ListingImageResponse:
        payload = ListingImageCreate(url=url, order=order, thumbnail_url=thumbnail_url, caption=caption)
        body = await self._request("POST", f"/listings/{listing_id}/images", json=self._dump(payload))
        return ListingImageResponse.model_validate(body)

    async def delete_image(self, image_id: Id) -> None:
        await self._request("DELETE", f"/listings/images/{image_id}")

    # Health

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")
