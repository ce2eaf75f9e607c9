from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Atelier Batch Generation API"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False

    database_url: str = "sqlite:///./app.db"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_image_model: str = "gpt-image-1"
    openai_image_size: str = "1024x1536"
    openai_timeout_seconds: float = 120.0
    openai_max_retries: int = 3
    reference_fetch_timeout_seconds: float = 15.0

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    media_dir: str = "data/media"
    media_url_prefix: str = "/media"
    max_upload_size_mb: int = 15
    rate_limit_per_minute: int = 60
    auto_create_tables: bool = True

    celery_broker_url: str = ""
    celery_result_backend: str = ""
    celery_task_always_eager: bool = False

    checkpoint_write_attempts: int = Field(default=3, ge=1)
    checkpoint_retry_delay_seconds: float = Field(default=0.5, ge=0)

    def get_celery_broker_url(self) -> str:
        return self.celery_broker_url or "redis://localhost:6379/0"

    def get_celery_result_backend(self) -> str:
        return self.celery_result_backend or self.get_celery_broker_url()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
