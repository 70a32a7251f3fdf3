"""
Application Configuration - Environment settings and constants.

Loads configuration from environment variables with sensible defaults.
Uses Pydantic Settings for validation and type safety.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Usage:
        from agent_router.core.config import get_settings
        settings = get_settings()
    """

    # Application
    app_name: str = "Agent Router"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    api_prefix: str = "/api/v1"
    allowed_origins: List[str] = ["*"]

    # Routing defaults
    default_routing_strategy: str = "first_match"
    semantic_threshold: float = 0.5

    # Embedding Configuration
    embedding_provider: str = "hash"  # "hash" (deterministic placeholder) or "local"
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = 1536
    embedding_device: str = "cpu"  # "cpu", "cuda", or "mps"
    embedding_cache_enabled: bool = True
    embedding_cache_size: int = 1024

    # Tool execution defaults
    tool_default_timeout_ms: int = 60000
    tool_max_concurrency: int = 5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "AGENT_ROUTER_"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience access
settings = get_settings()
