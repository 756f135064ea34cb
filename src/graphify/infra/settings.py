"""Environment-driven configuration for the charting service connection."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVICE_URL = "https://graphify-backend.onrender.com"


class ServiceSettings(BaseSettings):
    """Settings for the charting service client."""

    model_config = SettingsConfigDict(
        env_prefix="GRAPHIFY_SERVICE_",
        env_file=".env",
        extra="ignore",
    )

    base_url: str = Field(DEFAULT_SERVICE_URL, description="Charting service base URL")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(0, ge=0, description="Extra attempts after a failed request")
    retry_delay: float = Field(1.0, ge=0, description="Initial retry delay in seconds")
    offline: bool = Field(default=False, description="Use the in-memory mock service")
