"""
Shared configuration management for the Recipes API.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="RECIPES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    
    # External services
    redis_url: str = Field(default="redis://localhost:6379/0")
    postgres_dsn: str = Field(default="postgresql://localhost:5432/recipes")
    postgres_min_pool_size: int = Field(default=2)
    postgres_max_pool_size: int = Field(default=10)
    
    # Caching
    listing_cache_key: str = Field(default="recipes")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""
    
    service_name: str
    port: int = 8080
    host: str = "0.0.0.0"


def get_config(service_name: str, port: Optional[int] = None) -> ServiceConfig:
    """Get configuration for a specific service.

    An explicit ``port`` wins over ``RECIPES_PORT``.
    """
    if port is None:
        return ServiceConfig(service_name=service_name)
    return ServiceConfig(service_name=service_name, port=port)
