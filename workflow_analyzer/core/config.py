"""
Configuration management using Pydantic Settings.
Loads settings from environment variables and .env files.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class YouTrackSettings(BaseSettings):
    """YouTrack REST API settings."""

    model_config = SettingsConfigDict(env_prefix="YOUTRACK_", env_file=".env", extra="ignore")

    base_url: str = Field(
        default="http://localhost:8080",
        description="YouTrack instance URL (without the /api suffix)",
    )
    token: str = Field(default="", description="Permanent token used as bearer auth")
    timeout: int = Field(default=30, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class RedisSettings(BaseSettings):
    """Redis configuration settings."""

    model_config = SettingsConfigDict(env_prefix="REDIS_", env_file=".env", extra="ignore")

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    enabled: bool = Field(
        default=False,
        description="Use Redis as the cache store (in-process store otherwise)",
    )
    key_prefix: str = Field(default="youtrack:analyzer:", description="Prefix for all cache keys")


class LLMSettings(BaseSettings):
    """OpenAI-compatible completion endpoint settings."""

    model_config = SettingsConfigDict(env_prefix="LLM_", env_file=".env", extra="ignore")

    base_url: str = Field(default="https://api.openai.com/v1", description="API base URL")
    api_key: str = Field(default="", description="API key sent as bearer token")
    model: str = Field(default="gpt-4o", description="Model to use")
    max_tokens: int = Field(default=1500, description="Max tokens per response")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    timeout: int = Field(default=60, description="Request timeout in seconds")


class RetrySettings(BaseSettings):
    """Retry policy applied to every tracker call."""

    model_config = SettingsConfigDict(env_prefix="RETRY_", env_file=".env", extra="ignore")

    max_attempts: int = Field(default=3, ge=1, description="Attempts before giving up")
    delay_seconds: float = Field(default=1.0, ge=0, description="Fixed delay between attempts")


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="youtrack-workflow-analyzer", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=True, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # Sub-settings
    youtrack: YouTrackSettings = Field(default_factory=YouTrackSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"app_env must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for accessing settings
settings = get_settings()
