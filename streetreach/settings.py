"""
Application settings for the Street Reach service.

- Defaults are intended for development use.
- For testing, override via pyproject.toml [tool.pytest.ini_options].
- For production, set environment variables to override fields.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Street Reach service configuration."""

    # Supabase Configuration
    supabase_url: str = Field(description="Base URL of the Supabase project")
    supabase_service_role_key: str = Field(
        description="Service role key used for server-side table access",
    )
    supabase_jwt_secret: str = Field(
        description="JWT secret used to verify Supabase access tokens",
    )
    supabase_timeout: float = Field(
        default=30.0,
        description="Timeout for Supabase requests in seconds",
    )

    # Population paging
    person_page_size: int = Field(
        default=1000,
        description="Rows fetched per page when loading the person population",
    )
    person_max_pages: int = Field(
        default=50,
        description="Safety cap on pages fetched; rows beyond it are not considered",
    )

    # Client status
    active_window_days: int = Field(
        default=90,
        description="Days since last contact within which a client counts as active",
    )

    # CORS
    allowed_origin_regex: str = Field(
        default=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        description="Origins allowed to call the API from a browser",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context: object) -> None:
        """Initialize derived settings after model construction."""
        self.supabase_url = self.supabase_url.rstrip("/")


settings = Settings()
