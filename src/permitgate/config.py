"""Configuration module using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from PERMITGATE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PERMITGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Coordinator
    coordinator_backend: str = "redis"  # "redis" or "memory"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_max_connections: int = 10
    redis_socket_timeout: float = 5.0
    redis_socket_connect_timeout: float = 5.0

    # Key naming (must match existing deployments to interoperate)
    bucket_key_prefix: str = "rateLimit:bucket:"
    semaphore_key: str = "rateLimit:semaphore"

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience function for quick access
settings = get_settings()
