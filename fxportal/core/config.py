from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Portal settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    API_BASE_URL, RETRY_COUNT, RETRY_DELAY_MS, AUTO_DISMISS_MS, PAGE_SIZE).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Basic app metadata
    app_name: str = "FX Payment Portal"
    debug: bool = True
    version: str = "0.1.0"

    # Upstream payments service
    api_base_url: AnyHttpUrl = "http://localhost:8080"  # type: ignore[assignment]
    http_timeout_seconds: float = Field(5.0, gt=0)

    # Resource loading (applies to currencies and payment history)
    retry_count: int = Field(2, ge=0, le=10)
    retry_delay_ms: int = Field(1000, gt=0)

    # Notification banner
    auto_dismiss_ms: int = Field(5000, gt=0)

    # Payment history
    page_size: int = Field(20, gt=0, le=100)

    @property
    def api_base(self) -> str:
        return str(self.api_base_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
