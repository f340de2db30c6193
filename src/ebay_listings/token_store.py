"""Plaintext refresh token storage, one file per environment."""

from __future__ import annotations

import logging
from pathlib import Path

from ebay_listings.config import Environment

logger = logging.getLogger(__name__)


class RefreshTokenStore:
    """Reads and writes the refresh token file of a single environment."""

    def __init__(self, environment: Environment, directory: str | Path = ".") -> None:
        self.environment = environment
        self.path = Path(directory) / environment.token_file_name

    def load(self) -> str | None:
        """Return the stored refresh token, or None if there is none."""
        try:
            if not self.path.exists():
                return None
            token = self.path.read_text().strip()
        except OSError as e:
            logger.warning(f"Could not read refresh token from {self.path}: {e}")
            return None

        if not token:
            return None
        logger.info(f"Loaded {self.environment.value} refresh token from {self.path}")
        return token

    def save(self, refresh_token: str) -> None:
        """Persist a refresh token. Failures are logged, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(refresh_token)
        except OSError as e:
            logger.warning(f"Failed to save refresh token to {self.path}: {e}")
            return
        logger.info(f"Saved {self.environment.value} refresh token to {self.path}")

    def delete(self) -> bool:
        """Remove the token file. Returns False if it did not exist."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
