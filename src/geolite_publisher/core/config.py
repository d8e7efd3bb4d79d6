"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_REQUIRED_FIELDS = ("maxmind_account_id", "maxmind_license_key", "npm_token")


class ConfigError(Exception):
    """Raised when required configuration is missing."""

    def __init__(self, missing: list[str]):
        names = ", ".join(name.upper() for name in missing)
        super().__init__(f"Missing required environment variables: {names}")
        self.missing = missing


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # MaxMind (upstream)
    maxmind_account_id: str | None = Field(
        default=None,
        description="MaxMind account ID used for HTTP Basic auth",
    )
    maxmind_license_key: str | None = Field(
        default=None,
        description="MaxMind license key",
    )
    maxmind_auth_mode: Literal["basic", "query"] = Field(
        default="basic",
        description="Download auth style: 'basic' (account + key) or legacy 'query' (key in URL)",
    )
    maxmind_download_url: str = Field(
        default="https://download.maxmind.com",
        description="Base URL of the MaxMind download service",
    )
    maxmind_timeout: float = Field(
        default=60.0,
        description="Download request timeout in seconds",
        gt=0,
    )

    @field_validator("maxmind_download_url")
    @classmethod
    def validate_maxmind_download_url(cls, v: str) -> str:
        if not v.startswith("https://"):
            msg = "maxmind_download_url must use HTTPS"
            raise ValueError(msg)
        return v.rstrip("/")

    # npm (primary destination)
    npm_token: str | None = Field(
        default=None,
        description="npm automation token written to the bundle .npmrc",
    )
    npm_scope: str = Field(
        default="@geo-mmd",
        description="npm scope for published packages",
    )
    npm_registry_url: str = Field(
        default="https://registry.npmjs.org/",
        description="npm registry the token is scoped to",
    )
    npm_repository: str = Field(
        default="https://github.com/lihongjie0209/geo-mmd",
        description="Value of the repository field in generated package.json",
    )

    @field_validator("npm_scope")
    @classmethod
    def validate_npm_scope(cls, v: str) -> str:
        v = v.strip().lower()
        if not v.startswith("@") or len(v) < 2 or "/" in v:
            msg = "npm_scope must look like '@scope'"
            raise ValueError(msg)
        return v

    # Cloudflare R2 (secondary destination)
    cloudflare_account_id: str | None = Field(
        default=None,
        description="Cloudflare account ID owning the R2 bucket",
    )
    cloudflare_api_token: str | None = Field(
        default=None,
        description="Cloudflare API token with R2 write permission",
    )
    r2_bucket: str = Field(
        default="geo-mmd",
        description="R2 bucket name",
    )
    r2_api_url: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Cloudflare REST API base URL",
    )
    r2_upload_timeout: float = Field(
        default=300.0,
        description="Object upload timeout in seconds",
        gt=0,
    )

    @field_validator("cloudflare_account_id", "cloudflare_api_token", "r2_bucket")
    @classmethod
    def strip_cloudflare_values(cls, v: str | None) -> str | None:
        """Strip surrounding whitespace, e.g. a trailing newline from a secrets file."""
        if v is None:
            return None
        return v.strip()

    # Scratch space
    scratch_dir: str = Field(
        default="./geolite2_tmp",
        description="Working directory for archives, extracted files and npm bundles",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    @property
    def r2_enabled(self) -> bool:
        """Whether both Cloudflare credentials are configured."""
        return bool(self.cloudflare_account_id and self.cloudflare_api_token)

    @property
    def missing_required(self) -> list[str]:
        """Names of required settings that are unset or empty."""
        return [name for name in _REQUIRED_FIELDS if not getattr(self, name)]


def validate_required_settings(settings: Settings) -> None:
    """Fail fast when a required credential is absent.

    Raises:
        ConfigError: If any of MAXMIND_ACCOUNT_ID, MAXMIND_LICENSE_KEY or
            NPM_TOKEN is missing.
    """
    missing = settings.missing_required
    if missing:
        raise ConfigError(missing)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
