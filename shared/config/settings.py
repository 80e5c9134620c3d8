"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend
    api_base_url: str = "http://localhost:3001"
    api_token: str = ""  # Sent as a bearer token when set
    api_timeout_seconds: float = 30.0

    # Listing
    list_page_size: int = 10  # Rows per page on every admin screen
    bulk_page_size: int = 50  # Largest page the backend accepts
    max_bulk_pages: int = 200  # Upper bound for a single full-collection fetch
    collection_cache_ttl_seconds: float = 300.0  # 0 disables expiry

    # Products without stockMinimo fall back to this threshold
    default_stock_minimum: int = 5

    # Environment
    environment: str = "development"
    debug: bool = True

    def validate_production(self) -> list[str]:
        """
        Validate settings that must hold in production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.bulk_page_size < self.list_page_size:
            errors.append(
                "BULK_PAGE_SIZE must be greater than or equal to LIST_PAGE_SIZE"
            )

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.api_base_url.startswith("https://"):
                errors.append("API_BASE_URL must use https in production")

            if not self.api_token:
                errors.append("API_TOKEN must be set in production")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
