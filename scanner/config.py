"""Scanner settings loaded from environment or .env."""
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # LLM
    anthropic_api_key: str = ""
    model_name: str = "claude-3-5-haiku-latest"
    model_temperature: float = 0.3
    model_max_output_tokens: int = 2048

    # Rendering
    renderer_mode: str = "browser"  # browser|http
    render_timeout_ms: int = 15000
    single_page_timeout_ms: int = 20000
    render_settle_seconds: float = 1.5

    # Crawl / analysis pacing
    page_delay_seconds: float = 1.0
    analysis_delay_seconds: float = 1.0
    link_fanout: int = 10
    default_max_pages: int = 5
    default_max_depth: int = 2
    max_pages_limit: int = 50
    max_depth_limit: int = 5

    # Redis report cache
    redis_url: str = "redis://localhost:6379"
    cache_ttl_seconds: int = 3600

    # API
    rate_limit_requests: int = 30
    rate_limit_window_seconds: int = 60
    log_level: str = "INFO"

    @property
    def api_key_configured(self) -> bool:
        return bool(self.anthropic_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()
