"""
Configuration settings for the client library.
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # API Authentication
    NUTRIENT_API_KEY: Optional[str] = None  # Used when no api_key is passed to NutrientClient
    NUTRIENT_BASE_URL: str = "https://api.nutrient.io"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # Options: "text", "json"
    LOG_INCLUDE_REQUEST_ID: bool = True  # Include the workflow request id in logs

    # HTTP Client Configuration
    HTTP_CLIENT_TIMEOUT: float = 30.0  # Default timeout for API requests (seconds)
    HTTP_DOWNLOAD_TIMEOUT: float = 60.0  # Timeout for fetching URL file inputs (seconds)
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 10
    HTTP_MAX_CONNECTIONS: int = 20

    # Performance Monitoring
    RESPONSE_TIME_WARNING_THRESHOLD_MS: int = 30000  # Warn if a call takes longer than 30s

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
