"""Base API client for the eBay Sell APIs.

Attaches a bearer token to every request and decodes JSON responses.
Non-success statuses are raised immediately; there is no retry here.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ebay_listings.auth import AuthenticationService
from ebay_listings.config import EnvironmentProfile
from ebay_listings.utils.errors import ApiError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class EbayApiClient:
    """HTTP client for one eBay environment."""

    def __init__(
        self,
        profile: EnvironmentProfile,
        auth: AuthenticationService,
        verbose: bool = False,
    ) -> None:
        self._profile = profile
        self._auth = auth
        self._verbose = verbose
        self._http = httpx.Client(timeout=60.0)

    @property
    def auth(self) -> AuthenticationService:
        return self._auth

    def request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | list | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: API path relative to the environment endpoint
                  (e.g. "sell/inventory/v1/offer").
            body: JSON request body.
            params: Query parameters.

        Returns:
            The httpx.Response object.

        Raises:
            ApiError: On a transport failure or non-2xx status.
            AuthenticationFailedError: If no access token could be obtained.
        """
        url = self._profile.api_endpoint.rstrip("/") + "/" + path.lstrip("/")
        headers = self._build_headers()

        if self._verbose:
            logger.info(f"{method} {url}")
            if body:
                logger.info(f"Body: {body}")

        try:
            response = self._http.request(
                method=method,
                url=url,
                headers=headers,
                json=body,
                params=params,
            )
        except httpx.HTTPError as e:
            raise ApiError(0, str(e), method, path) from e

        if self._verbose:
            logger.info(f"Response: {response.status_code}")

        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, response.text, method, path)

        return response

    def get(self, path: str, params: dict[str, Any] | None = None, model: type[ModelT] | None = None) -> Any:
        """GET a resource and decode it, optionally into ``model``."""
        return self._decode(self.request("GET", path, params=params), model, "GET", path)

    def post(self, path: str, body: dict[str, Any] | None = None, model: type[ModelT] | None = None) -> Any:
        """POST a JSON body and decode the response."""
        return self._decode(self.request("POST", path, body=body), model, "POST", path)

    def put(self, path: str, body: dict[str, Any] | None = None, model: type[ModelT] | None = None) -> Any:
        """PUT a JSON body and decode the response."""
        return self._decode(self.request("PUT", path, body=body), model, "PUT", path)

    def delete(self, path: str) -> None:
        """DELETE a resource."""
        self.request("DELETE", path)

    def _build_headers(self) -> dict[str, str]:
        """Build request headers with a fresh bearer token."""
        token = self._auth.get_access_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Content-Language": "en-US",
        }

    @staticmethod
    def _decode(response: httpx.Response, model: type[ModelT] | None, method: str, path: str) -> Any:
        """Decode a JSON body. Empty bodies (201/204) decode to None, or an empty model.

        Raises:
            ApiError: If a success response carries a body that is not JSON
                or does not match ``model``.
        """
        try:
            data = response.json() if response.content else None
            if model is None:
                return data
            return model.model_validate(data or {})
        except (ValueError, ValidationError) as e:
            raise ApiError(response.status_code, response.text, method, path) from e

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
        self._auth.close()
