# repo_browser/config.py
from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service configuration, read from the environment and `.env`.

    The four GITHUB_* coordinates have no defaults: a missing value is a
    startup error, never a per-request one.
    """

    # App
    APP_NAME: str = "Repo Browser API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    CORS_ALLOW_ORIGINS: str = "*"
    CORS_ALLOW_METHODS: str = "GET,OPTIONS"
    CORS_ALLOW_HEADERS: str = "*"

    # GitHub contents API
    GITHUB_API: str
    GITHUB_USERNAME: str
    GITHUB_REPO: str
    GITHUB_TOKEN: SecretStr
    GITHUB_TIMEOUT_SECONDS: float = 30.0

    # Cache
    CACHE_TTL_SECONDS: float = Field(default=60 * 60, gt=0)
    CACHE_SINGLE_FLIGHT: bool = True

    # Rate limits (per client address)
    RATE_LIMIT: str = "30/minute"

    # Observability
    ENABLE_PROMETHEUS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("GITHUB_API", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("GITHUB_API", "GITHUB_USERNAME", "GITHUB_REPO", mode="after")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @property
    def repo_base_url(self) -> str:
        return f"{self.GITHUB_API}/{self.GITHUB_USERNAME}/{self.GITHUB_REPO}"

    @staticmethod
    def split_csv(value: str) -> list[str]:
        return [v.strip() for v in value.split(",") if v.strip()]
