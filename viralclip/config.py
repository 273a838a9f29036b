"""Application configuration."""
from typing import Dict, List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIRALCLIP_",
    )

    # App settings
    app_name: str = "ViralClip"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/viralclip.db"

    # Automation engine
    automation_tick_seconds: float = 60.0  # Scheduler cadence
    recent_jobs_limit: int = 10

    # Platforms
    supported_platforms: List[str] = ["TikTok", "Instagram", "YouTube Shorts", "Twitter"]
    platform_webhook_urls: Dict[str, str] = {}  # Platforms listed here post via webhook
    webhook_timeout_seconds: float = 30.0

    # Simulated posting (platforms without a webhook)
    simulated_post_min_delay: float = 1.0
    simulated_post_max_delay: float = 3.0
    simulated_post_success_rate: float = 0.95
    simulated_connection_success_rate: float = 0.9

    # CORS
    cors_origins: List[str] = ["*"]


settings = Settings()
