"""Async HTTP client for the learning platform REST API.

Handles:
- Base URL and request timeout from settings
- Bearer token injection from an external token provider
- Unwrapping of the ``{"success": true, "data": ...}`` response envelope
- Translation of transport and HTTP failures into ``ApiError``
"""

from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from lesson_tracker.config.settings import Settings
from lesson_tracker.core.exceptions import TrackerError


logger = structlog.get_logger(__name__)

TokenProvider = Callable[[], Awaitable[str | None]]

# Status used when the request never produced an HTTP response
STATUS_UNREACHABLE = 0
# Status used when the response could not be interpreted
STATUS_UNKNOWN = -1


class ApiError(TrackerError):
    """Raised when a REST call fails.

    Attributes:
        status: HTTP status code, ``0`` when the server could not be reached,
            ``-1`` for anything else.
        data: Decoded error body, when the server sent one.
    """

    def __init__(
        self,
        message: str,
        status: int = STATUS_UNKNOWN,
        data: Any = None,
        code: str = "api_error",
    ):
        self.status = status
        self.data = data
        super().__init__(message, code)

    @property
    def is_not_found(self) -> bool:
        """Check if the server answered 404."""
        return self.status == httpx.codes.NOT_FOUND


def unwrap_envelope(body: Any) -> Any:
    """Return ``data`` from a successful envelope, otherwise the body itself."""
    if isinstance(body, dict) and body.get("success") is True and "data" in body:
        return body["data"]
    return body


def _decode_error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class ApiClient:
    """Thin async wrapper over ``httpx.AsyncClient``.

    One instance is shared by everything that talks to the backend during a
    playback session. Close it with ``aclose()`` or use it as an async
    context manager.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``https://example.com/api``.
            timeout: Request timeout in seconds.
            token_provider: Async callable returning the current access token.
            transport: Optional transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        """Build a client from tracker settings."""
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.api_request_timeout,
            token_provider=token_provider,
            transport=transport,
        )

    async def _auth_headers(self) -> dict[str, str]:
        if self._token_provider is None:
            return {}
        try:
            token = await self._token_provider()
        except Exception as e:
            # Proceed unauthenticated, the server decides
            logger.warning("api_token_unavailable", error=str(e))
            return {}
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the unwrapped response data.

        Raises:
            ApiError: On timeout, transport failure, HTTP error status or an
                undecodable body.
        """
        headers = await self._auth_headers()

        logger.debug(
            "api_request",
            method=method,
            path=path,
            has_token="Authorization" in headers,
        )

        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.warning("api_timeout", method=method, path=path, error=str(e))
            raise ApiError("Request timed out", status=STATUS_UNREACHABLE) from e
        except httpx.RequestError as e:
            logger.warning("api_request_error", method=method, path=path, error=str(e))
            raise ApiError(
                "Could not connect to server", status=STATUS_UNREACHABLE
            ) from e

        if response.is_error:
            data = _decode_error_body(response)
            message = data.get("message") if isinstance(data, dict) else None
            logger.info(
                "api_error_response",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise ApiError(
                message or "An error occurred",
                status=response.status_code,
                data=data,
            )

        if not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise ApiError("Malformed response body", status=STATUS_UNKNOWN) from e

        return unwrap_envelope(body)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Send a GET request."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        """Send a POST request."""
        return await self.request("POST", path, json=json)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()
