"""Auth-related data models."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel


class TokenResponse(BaseModel):
    """Response from the eBay OAuth2 token endpoint."""
    access_token: str
    token_type: str = "User Access Token"
    expires_in: int = 7200
    refresh_token: str | None = None
    refresh_token_expires_in: int | None = None


class AccessToken(BaseModel):
    """An access token and the moment it stops being usable."""
    token: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


class TokenStatus(BaseModel):
    """Current state of the cached access token."""
    environment: str
    has_token: bool
    is_expired: bool
    has_refresh_token: bool = False
    expires_at: datetime | None = None
    seconds_remaining: int | None = None
