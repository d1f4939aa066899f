"""
Shared configuration management for the Eligibility Service.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ELIGIBILITY_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Log level")

    # Localisation
    default_locale: str = Field(default="en", description="Locale used when none is negotiated")
    supported_locales: List[str] = Field(default_factory=lambda: ["en", "hi"])

    # Evaluation
    strict_checking: bool = Field(default=False, description="Treat null profile values as missing")
    batch_concurrency: int = Field(default=8, ge=1, description="Concurrent batch evaluations")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = 3011
    host: str = "0.0.0.0"


def get_config(service_name: str, port: Optional[int] = None) -> ServiceConfig:
    """Get configuration for a specific service.

    An explicit ``port`` wins over ``ELIGIBILITY_PORT``.
    """
    overrides = {"port": port} if port is not None else {}
    return ServiceConfig(service_name=service_name, **overrides)
