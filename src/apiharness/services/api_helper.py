"""Environment-aware async API helper.

This module provides ApiHelper, the single caller of the HTTP transport.
It applies the environment's base URL, default headers and timeout, merges
auth headers from an attached AuthHelper, and returns every HTTP response
(including 4xx/5xx) as an ApiResponse for the test to assert on.
"""

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from apiharness.config.environments import EnvironmentConfig
from apiharness.core.exceptions import TransportError
from apiharness.services.models import ApiResponse, AuthState
from apiharness.validation.response_validator import parse_as

if TYPE_CHECKING:
    from apiharness.services.auth_helper import AuthHelper

log = structlog.get_logger(__name__)


class ApiHelper:
    """Async HTTP helper bound to one environment.

    Provides:
    - Lazy client initialization (created on first request)
    - Header merging: config defaults < auth headers < per-call headers
    - Typed unwrapping of 2xx bodies into pydantic models
    - Transport failures mapped to TransportError, with no retries

    Attributes:
        config: Resolved environment configuration.
        auth: Attached AuthHelper, if any.

    Example:
        async with ApiHelper(config) as api:
            response = await api.get("/users/1", model=User)
            assert response.status == 200
    """

    def __init__(
        self,
        config: EnvironmentConfig,
        auth: "AuthHelper | None" = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize ApiHelper.

        Args:
            config: Resolved environment configuration.
            auth: Optional AuthHelper whose headers are merged into requests.
            client: Optional externally-owned httpx client. When given, the
                helper never closes it.
        """
        self.config = config
        self.auth = auth
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "ApiHelper":
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def attach_auth(self, auth: "AuthHelper") -> None:
        """Attach an AuthHelper after construction."""
        self.auth = auth

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization).

        Returns:
            The httpx AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
            )
            self._owns_client = True
            log.debug("httpx_client_created", base_url=self.config.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client if this helper created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", base_url=self.config.base_url)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.config.base_url}/{path.lstrip('/')}"

    async def _build_headers(
        self,
        overrides: Mapping[str, str | None] | None,
        authenticate: bool,
    ) -> dict[str, str]:
        headers = dict(self.config.default_headers)

        if authenticate and self.auth is not None and self.auth.state is not AuthState.ANONYMOUS:
            headers.update(await self.auth.get_auth_headers())

        for key, value in (overrides or {}).items():
            # Header names are case-insensitive; drop any existing spelling
            for existing in [name for name in headers if name.lower() == key.lower()]:
                del headers[existing]
            if value is not None:
                headers[key] = value

        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str | None] | None = None,
        timeout: float | None = None,
        model: Any = None,
        authenticate: bool = True,
    ) -> ApiResponse[Any]:
        """Send a request and snapshot the response.

        Args:
            method: HTTP method.
            path: Path relative to the environment base URL, or an absolute URL.
            json: JSON-serializable request body.
            params: Query parameters.
            headers: Per-call header overrides. A None value removes the header.
            timeout: Per-call timeout in seconds (default: config timeout).
            model: Type to validate a 2xx body into (pydantic model, list[Model], ...).
            authenticate: Merge auth headers when an AuthHelper is attached.

        Returns:
            ApiResponse for any HTTP status.

        Raises:
            TransportError: If no HTTP response was received.
            ValidationFailedError: If a 2xx body does not match `model`.
            AuthenticationFailedError: If a due token refresh fails.
        """
        method = method.upper()
        url = self._url(path)
        client = await self._get_client()
        request_headers = await self._build_headers(headers, authenticate)
        effective_timeout = timeout if timeout is not None else self.config.timeout

        log.debug("api_request", method=method, url=url, timeout=effective_timeout)
        started = time.perf_counter()

        try:
            response = await client.request(
                method,
                url,
                json=json,
                params=params,
                headers=request_headers,
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as e:
            log.warning("api_transport_error", kind=TransportError.TIMEOUT, method=method, url=url)
            raise TransportError(
                TransportError.TIMEOUT, method, url, str(e) or type(e).__name__
            ) from e
        except httpx.RequestError as e:
            log.warning(
                "api_transport_error",
                kind=TransportError.NETWORK,
                method=method,
                url=url,
                error=str(e),
            )
            raise TransportError(
                TransportError.NETWORK, method, url, str(e) or type(e).__name__
            ) from e

        elapsed_ms = (time.perf_counter() - started) * 1000
        data = _decode_body(response)
        if model is not None and response.is_success:
            data = parse_as(data, model)

        log.info(
            "api_response",
            method=method,
            url=url,
            status=response.status_code,
            elapsed_ms=round(elapsed_ms, 1),
        )

        return ApiResponse(
            status=response.status_code,
            headers=response.headers,
            data=data,
            raw=response.content,
            elapsed_ms=elapsed_ms,
            method=method,
            url=str(response.request.url),
        )

    async def get(self, path: str, **kwargs: Any) -> ApiResponse[Any]:
        """Make a GET request."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> ApiResponse[Any]:
        """Make a POST request."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> ApiResponse[Any]:
        """Make a PUT request."""
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> ApiResponse[Any]:
        """Make a PATCH request."""
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse[Any]:
        """Make a DELETE request."""
        return await self.request("DELETE", path, **kwargs)


def _decode_body(response: httpx.Response) -> Any:
    """JSON when possible, text otherwise, None for an empty body."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
