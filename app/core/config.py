from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Any, List

DEFAULT_CACHE_TTL = 60 * 60
DEFAULT_PORT = 3000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    # App Settings
    APP_NAME: str = "REST Countries API"
    PROJECT_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = DEFAULT_PORT
    ALLOWED_ORIGINS: str = "*"  # Comma-separated string or "*"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = False
    RATE_LIMIT: str = "100/minute"

    # Upstream + caching
    UPSTREAM_BASE_URL: str = "https://restcountries.com/v3.1"
    UPSTREAM_TIMEOUT: float = 10.0
    CACHE_TTL: int = DEFAULT_CACHE_TTL  # seconds
    ERROR_LOG_PATH: str = "error_log.json"

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    @field_validator("CACHE_TTL", mode="before")
    @classmethod
    def _fallback_ttl(cls, value: Any) -> int:
        return _as_positive_int(value, DEFAULT_CACHE_TTL)

    @field_validator("PORT", mode="before")
    @classmethod
    def _fallback_port(cls, value: Any) -> int:
        return _as_positive_int(value, DEFAULT_PORT)

    # Parse ALLOWED_ORIGINS
    @property
    def allowed_origins_list(self) -> List[str]:
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


def _as_positive_int(value: Any, default: int) -> int:
    # Garbage in the environment falls back to the default instead of
    # refusing to boot.
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


settings = Settings()
