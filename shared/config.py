"""
Shared configuration management for the aggregator routing stage.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="AGGREGATORS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    service_name: str = Field(default="aggregators")
    
    # Self-instrumentation
    enable_metrics_server: bool = Field(default=False)
    metrics_port: int = Field(default=9273)


def get_config(**overrides) -> BaseConfig:
    """Get configuration, env values overridden by keyword arguments."""
    return BaseConfig(**overrides)
