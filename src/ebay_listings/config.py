"""Configuration management for eBay Listings CLI.

Loads per-environment credentials from .env and API endpoints from
config/environments.yaml.
"""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv


DEFAULT_SCOPES = [
    "https://api.ebay.com/oauth/api_scope/sell.inventory",
    "https://api.ebay.com/oauth/api_scope/sell.account",
]

# Used when config/environments.yaml is not present
DEFAULT_ENDPOINTS = {
    "production": {
        "api_endpoint": "https://api.ebay.com/",
        "auth_endpoint": "https://auth.ebay.com/oauth2/authorize",
        "token_endpoint": "https://api.ebay.com/identity/v1/oauth2/token",
    },
    "sandbox": {
        "api_endpoint": "https://api.sandbox.ebay.com/",
        "auth_endpoint": "https://auth.sandbox.ebay.com/oauth2/authorize",
        "token_endpoint": "https://api.sandbox.ebay.com/identity/v1/oauth2/token",
    },
}


class Environment(str, Enum):
    PRODUCTION = "production"
    SANDBOX = "sandbox"

    @classmethod
    def parse(cls, value: str | Environment) -> Environment:
        """Parse an environment name case-insensitively."""
        if isinstance(value, Environment):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            available = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown environment '{value}'. Available: {available}") from None

    @property
    def token_file_name(self) -> str:
        """Name of the file the refresh token is persisted to."""
        return f"{self.value}_refresh_token.txt"


class EnvironmentProfile(BaseModel):
    """A single environment's API endpoints."""
    api_endpoint: str
    auth_endpoint: str
    token_endpoint: str


class Credential(BaseModel):
    """OAuth application credentials for one environment."""
    environment: Environment
    client_id: str = Field(default="", description="eBay application client ID (App ID)")
    client_secret: str = Field(default="", description="eBay application client secret (Cert ID)")
    redirect_uri: str = Field(default="", description="eBay redirect URI name (RuName)")
    refresh_token: str = Field(default="", description="OAuth refresh token, may be filled in lazily")
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))


class Settings(BaseModel):
    """Application settings loaded from environment variables."""
    marketplace_id: str = Field(default="EBAY_US", description="Marketplace for offers and policies")
    migration_page_size: int = Field(default=10, description="Listings enumerated per migration run")
    migration_delay: float = Field(default=1.0, description="Seconds to wait between migrated listings")
    token_dir: str = Field(default="", description="Directory holding refresh token files")


class Config(BaseModel):
    """Full application configuration."""
    settings: Settings
    credentials: dict[Environment, Credential]
    environments: dict[Environment, EnvironmentProfile]

    def get_environment(self, environment: str | Environment) -> EnvironmentProfile:
        """Get the endpoint profile for an environment."""
        env = Environment.parse(environment)
        if env not in self.environments:
            raise ValueError(f"Environment '{env.value}' is not configured")
        return self.environments[env]

    def get_credential(self, environment: str | Environment) -> Credential:
        """Get the credential set for an environment."""
        env = Environment.parse(environment)
        if env not in self.credentials:
            raise ValueError(f"No credentials configured for '{env.value}'. Check your .env file.")
        return self.credentials[env]


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where config/ lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "config" / "environments.yaml").exists():
            return parent
    # Fallback: cwd
    return Path.cwd()


def _load_environments(project_root: Path) -> dict[Environment, EnvironmentProfile]:
    """Load environment endpoints from environments.yaml, or the built-in defaults."""
    path = project_root / "config" / "environments.yaml"
    data: dict = {"environments": DEFAULT_ENDPOINTS}
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or data

    environments = {}
    for name, profile_data in data.get("environments", {}).items():
        environments[Environment.parse(name)] = EnvironmentProfile(**profile_data)
    return environments


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _split_scopes(raw: str) -> list[str]:
    return [s.strip() for s in raw.split(",") if s.strip()]


def _load_credential(environment: Environment) -> Credential:
    """Load one environment's credentials.

    Reads EBAY_<ENV>_* variables; the production set also accepts the
    unprefixed EBAY_* names.
    """
    prefix = f"EBAY_{environment.name}_"
    fallback = "EBAY_" if environment is Environment.PRODUCTION else prefix
    scopes = _split_scopes(_env(prefix + "SCOPES", fallback + "SCOPES"))
    return Credential(
        environment=environment,
        client_id=_env(prefix + "CLIENT_ID", fallback + "CLIENT_ID"),
        client_secret=_env(prefix + "CLIENT_SECRET", fallback + "CLIENT_SECRET"),
        redirect_uri=_env(prefix + "REDIRECT_URI", fallback + "REDIRECT_URI"),
        refresh_token=_env(prefix + "REFRESH_TOKEN", fallback + "REFRESH_TOKEN"),
        scopes=scopes or list(DEFAULT_SCOPES),
    )


def _load_settings(project_root: Path | None = None) -> Settings:
    """Load settings from environment variables."""
    return Settings(
        marketplace_id=_env("EBAY_MARKETPLACE_ID", default="EBAY_US"),
        migration_page_size=int(_env("EBAY_MIGRATION_PAGE_SIZE", default="10")),
        migration_delay=float(_env("EBAY_MIGRATION_DELAY", default="1.0")),
        token_dir=_env("EBAY_TOKEN_DIR", default=str(project_root or Path.cwd())),
    )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache the full application configuration."""
    project_root = _find_project_root()

    # Load .env from project root if it exists
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Config(
        settings=_load_settings(project_root),
        credentials={env: _load_credential(env) for env in Environment},
        environments=_load_environments(project_root),
    )
