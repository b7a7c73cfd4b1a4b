"""
Request middleware: request ids, body size limit and access logging.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import APIException, BadRequestError, PayloadTooLargeError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ValidationMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a short id (request.state.request_id and the
    X-Request-ID response header), rejects bodies whose declared
    Content-Length is over the limit, and writes one log line per request.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_request_size: int = 1024 * 1024,
        enable_request_logging: bool = True
    ):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            self._check_content_length(request)
            response = await call_next(request)
        except APIException as exc:
            response = ErrorHandlerService.handle_api_exception(exc, request)
        except Exception as exc:
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        if self.enable_request_logging:
            self._log_request(request, response, time.perf_counter() - started)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _check_content_length(self, request: Request) -> None:
        """
        Raises:
            BadRequestError: Content-Length is not an integer
            PayloadTooLargeError: Declared body is over the limit
        """
        declared = request.headers.get("content-length")
        if not declared:
            return
        try:
            size = int(declared)
        except ValueError:
            raise BadRequestError("Invalid content-length header")
        if size > self.max_request_size:
            raise PayloadTooLargeError(size, self.max_request_size)

    @staticmethod
    def _client_ip(request: Request) -> str:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _log_request(self, request: Request, response: Response, elapsed: float) -> None:
        identity = getattr(request.state, "identity", None)
        logger.info(
            f"[{request.state.request_id}] {request.method} {request.url.path} "
            f"-> {response.status_code} ({elapsed:.3f}s)",
            extra={
                "client_ip": self._client_ip(request),
                "user_id": str(identity.id) if identity else None,
            }
        )
