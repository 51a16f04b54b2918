from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    anthropic_api_key: str = Field(min_length=1)
    anthropic_base_url: str = Field(default="https://api.anthropic.com", pattern=r"^https?://")
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = Field(default=4000, ge=1)
    anthropic_timeout_seconds: float = Field(default=60.0, gt=0)
    app_name: str = "TripBrief"
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    redis_url: str | None = None
    rate_limit_prefix: str = Field(default="tripbrief:ratelimit", min_length=1)
    rate_limit_per_minute: int = Field(default=3, ge=1)
    rate_limit_per_hour: int = Field(default=30, ge=1)
    store_timeout_seconds: float = Field(default=0.5, gt=0)
    sweep_interval_seconds: float = Field(default=300, gt=0)


settings = Settings()
