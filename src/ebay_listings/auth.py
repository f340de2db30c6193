"""OAuth2 authentication for the eBay REST APIs.

Handles the authorization-code flow, refresh-token exchange, token caching
and expiry tracking for a single environment.
"""

from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable
from urllib.parse import parse_qs, quote, unquote, urlencode, urlparse

import httpx

from ebay_listings.config import Credential, Environment, EnvironmentProfile
from ebay_listings.models.auth import AccessToken, TokenResponse, TokenStatus
from ebay_listings.token_store import RefreshTokenStore
from ebay_listings.utils.errors import ApiError, AuthenticationFailedError

logger = logging.getLogger(__name__)


# Tokens are treated as expired this long before eBay says they are
SAFETY_MARGIN = timedelta(minutes=10)

PromptForCode = Callable[[str], str]


class TokenCache:
    """Holds one access token and decides whether it is stale."""

    def __init__(self) -> None:
        self._token: AccessToken | None = None

    @property
    def token(self) -> AccessToken | None:
        return self._token

    def get(self, now: datetime) -> AccessToken | None:
        """Return the cached token if it is still usable at ``now``."""
        if self._token is None or not self._token.is_valid(now):
            return None
        return self._token

    def store(self, token: AccessToken) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


def parse_authorization_code(value: str) -> str:
    """Extract the authorization code from user input.

    Accepts the bare (possibly URL-encoded) code or the full redirect URL.
    """
    value = value.strip()
    if "code=" in value:
        query = urlparse(value).query or value
        codes = parse_qs(query).get("code")
        if codes:
            return codes[0]
    return unquote(value)


class AuthenticationService:
    """Produces valid access tokens for one eBay environment."""

    def __init__(
        self,
        credential: Credential,
        profile: EnvironmentProfile,
        store: RefreshTokenStore | None = None,
        prompt: PromptForCode | None = None,
    ) -> None:
        # Copy so the refresh token filled in later stays owned by this instance
        self._credential = credential.model_copy(deep=True)
        self._profile = profile
        self._store = store
        self._prompt = prompt
        self._cache = TokenCache()
        self._lock = threading.Lock()
        self._http = httpx.Client(timeout=30.0)

    @property
    def environment(self) -> Environment:
        return self._credential.environment

    @property
    def has_refresh_token(self) -> bool:
        return bool(self._credential.refresh_token)

    def get_access_token(self, force_refresh: bool = False) -> str:
        """Get a valid access token, acquiring a new one if needed.

        Acquisition order: cached token, refresh token held in memory, refresh
        token from the token store, interactive authorization-code flow.

        Raises:
            AuthenticationFailedError: If no token could be obtained.
        """
        with self._lock:
            if not force_refresh:
                cached = self._cache.get(datetime.now())
                if cached is not None:
                    return cached.token

            if not self._credential.refresh_token:
                self._load_refresh_token()

            if not self._credential.refresh_token:
                self._authorize_interactively()

            return self.refresh_access_token().token

    def get_authorization_url(self, state: str | None = None) -> str:
        """Build the consent URL a user visits to grant access."""
        params = {
            "client_id": self._credential.client_id,
            "redirect_uri": self._credential.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._credential.scopes),
            "state": state or secrets.token_urlsafe(16),
        }
        return f"{self._profile.auth_endpoint}?{urlencode(params, quote_via=quote)}"

    def exchange_code_for_refresh_token(self, code: str) -> str:
        """Trade an authorization code for a refresh token and persist it."""
        token_data = self._post_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._credential.redirect_uri,
            },
            action="Authorization code exchange",
        )
        if not token_data.refresh_token:
            raise AuthenticationFailedError(
                "Authorization code exchange failed: response did not include a refresh token"
            )

        self._credential.refresh_token = token_data.refresh_token
        if self._store is not None:
            self._store.save(token_data.refresh_token)
        return token_data.refresh_token

    def refresh_access_token(self) -> AccessToken:
        """Exchange the refresh token for a new access token and cache it."""
        if not self._credential.refresh_token:
            raise AuthenticationFailedError(
                f"No refresh token available for {self.environment.value}"
            )

        token_data = self._post_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": self._credential.refresh_token,
                "scope": " ".join(self._credential.scopes),
            },
            action="Token refresh",
        )
        lifetime = timedelta(seconds=token_data.expires_in) - SAFETY_MARGIN
        token = AccessToken(
            token=token_data.access_token,
            expires_at=datetime.now() + lifetime,
        )
        self._cache.store(token)
        logger.info(f"Obtained {self.environment.value} access token, valid until {token.expires_at}")
        return token

    def get_status(self) -> TokenStatus:
        """Get the current token status."""
        token = self._cache.token
        if token is None:
            return TokenStatus(
                environment=self.environment.value,
                has_token=False,
                is_expired=True,
                has_refresh_token=self.has_refresh_token,
            )

        now = datetime.now()
        is_expired = not token.is_valid(now)
        seconds_remaining = None
        if not is_expired:
            seconds_remaining = int((token.expires_at - now).total_seconds())

        return TokenStatus(
            environment=self.environment.value,
            has_token=True,
            is_expired=is_expired,
            has_refresh_token=self.has_refresh_token,
            expires_at=token.expires_at,
            seconds_remaining=seconds_remaining,
        )

    def _load_refresh_token(self) -> None:
        if self._store is None:
            return
        stored = self._store.load()
        if stored:
            self._credential.refresh_token = stored

    def _authorize_interactively(self) -> None:
        """Run the authorization-code flow through the prompt capability."""
        if self._prompt is None:
            raise AuthenticationFailedError(
                f"Refresh token for {self.environment.value} is not configured "
                "and no interactive prompt is available"
            )

        url = self.get_authorization_url()
        logger.info(f"Starting authorization-code flow for {self.environment.value}")
        code = parse_authorization_code(self._prompt(url) or "")
        if not code:
            raise AuthenticationFailedError("No authorization code was entered")
        self.exchange_code_for_refresh_token(code)

    def _post_token(self, data: dict[str, str], action: str) -> TokenResponse:
        """POST to the token endpoint, wrapping every failure."""
        try:
            response = self._http.post(
                self._profile.token_endpoint,
                data=data,
                auth=(self._credential.client_id, self._credential.client_secret),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise AuthenticationFailedError(f"{action} failed: {e}") from e

        if response.status_code != 200:
            error_detail = response.text
            try:
                error_json = response.json()
                error_detail = error_json.get("error_description", error_json.get("error", response.text))
            except ValueError:
                pass
            raise AuthenticationFailedError(
                f"{action} failed (HTTP {response.status_code}): {error_detail}"
            ) from ApiError(response.status_code, response.text)

        try:
            return TokenResponse(**response.json())
        except (ValueError, TypeError) as e:
            raise AuthenticationFailedError(f"{action} failed: unexpected response: {e}") from e

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
