"""Configuration settings for the Brightcove provider."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Brightcove provider configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="BRIGHTCOVE_", case_sensitive=False)

    # Default account credentials (channel secrets override these per call)
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    account_id: Optional[str] = None
    policy_key: Optional[str] = None

    # Request behaviour
    concurrent_request_limit: int = Field(default=20, ge=1)
    request_timeout: float = 30.0
    skip_schedule_check: bool = False

    # Upstream endpoints
    oauth_base_url: str = "https://oauth.brightcove.com/v3"
    cms_api_base_url: str = "https://cms.api.brightcove.com/v1"
    playback_api_base_url: str = "https://edge.api.brightcove.com/playback/v1"
    policy_api_base_url: str = "https://policy.api.brightcove.com/v1"

    # Service settings
    service_name: str = "brightcove-provider"  # NATS queue group for query handlers
    nats_url: str = "nats://localhost:4222"
    log_level: str = "INFO"
    metrics_port: int = 0  # 0 disables the exporter
    channel_cache_ttl: float = 60.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
