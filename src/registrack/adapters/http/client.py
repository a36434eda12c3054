"""JSON-over-HTTP client for the backend API.

The bearer credential is an explicit argument of every call. The client
holds no authentication state, so a logout can never leave a stale
header behind and concurrent callers cannot observe each other's token.
Every failure surfaces as ApiClientError.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from registrack.config import ApiClientConfig
from registrack.core.errors import ApiClientError, classify, classify_response, decode_body

logger = structlog.get_logger()


class ApiClient:
    """Backend API client.

    Example:
        >>> client = ApiClient(ApiClientConfig(base_url="https://api.example.com/api"))
        >>> body = await client.get("/gestion-solicitudes/mias", token=session.token)
    """

    def __init__(
        self,
        config: ApiClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            config: Base URL and timeout.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.config = config or ApiClientConfig()
        self._transport = transport

    async def get(
        self,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """GET a path and return the decoded JSON body."""
        return await self.request("GET", path, token=token, params=params)

    async def post(self, path: str, json: Any = None, *, token: str | None = None) -> Any:
        """POST a JSON body and return the decoded JSON body."""
        return await self.request("POST", path, token=token, json=json)

    async def put(self, path: str, json: Any = None, *, token: str | None = None) -> Any:
        """PUT a JSON body and return the decoded JSON body."""
        return await self.request("PUT", path, token=token, json=json)

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Perform a request.

        Args:
            method: HTTP method.
            path: Path relative to the configured base URL.
            token: Bearer credential for this call only.
            json: JSON body.
            params: Query parameters.

        Returns:
            The decoded JSON body, or None for an empty or non-JSON body.

        Raises:
            ApiClientError: On a network failure or a non-2xx response.
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    json=json,
                    params=params,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            error = classify(e)
            self._log_failure(method, path, error)
            raise error from e

        if response.is_error:
            error = classify_response(
                response.status_code,
                decode_body(response),
                response.headers,
            )
            self._log_failure(method, path, error)
            raise error

        return decode_body(response)

    @staticmethod
    def _log_failure(method: str, path: str, error: ApiClientError) -> None:
        logger.warning(
            "api_request_failed",
            method=method,
            path=path,
            status=error.status,
            kind=error.kind.value,
        )
