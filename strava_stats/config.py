"""Application configuration using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Strava API Configuration
    strava_client_id: str = Field(default="", description="Strava API Client ID (may also be entered via the API)")
    strava_client_secret: str = Field(default="", description="Strava API Client Secret")
    strava_oauth_base_url: str = Field(default="https://www.strava.com/oauth", description="Strava OAuth Base URL")
    strava_api_base_url: str = Field(default="https://www.strava.com/api/v3", description="Strava API Base URL")
    strava_redirect_uri: str = Field(
        default="http://localhost:8000/api/v1/auth/callback",
        description="Redirect URI registered with the Strava application"
    )
    strava_state_file: str = Field(default="data/strava_state.json", description="Path to store credentials and tokens")

    # Sync Configuration
    activities_page_size: int = Field(default=200, ge=1, le=200, description="Activities requested per page")
    activities_max_pages: int = Field(default=1000, ge=1, description="Give up a sync after this many full pages")
    token_refresh_margin_seconds: int = Field(default=3600, ge=0, description="Refresh tokens expiring within this window")
    http_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for calls to Strava")

    # Application Configuration
    app_host: str = Field(default="0.0.0.0", description="Application host")
    app_port: int = Field(default=8000, description="Application port")
    app_debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
