"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "header-forge"
    app_env: str = "dev"
    log_level: str = "INFO"

    # Quota
    daily_limit: int = Field(default=10, ge=1)
    max_batch_size: int = Field(default=10, ge=1, le=10)
    quota_policy: Literal["strict", "soft"] = "strict"
    quota_backend: Literal["postgres", "memory"] = "postgres"
    quota_ttl_s: int = Field(default=48 * 60 * 60, ge=1)
    database_url: str = ""

    # Generation
    llm_provider: Literal["gemini", "openai"] = "gemini"
    concept_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"
    llm_base_url: str = ""
    llm_timeout_s: float = Field(default=60.0, ge=0.5)
    llm_max_retries: int = Field(default=1, ge=0)
    llm_backoff_s: float = Field(default=0.5, ge=0.0)
    gemini_api_key: str = ""
    openai_api_key: str = ""
    fetch_timeout_s: float = Field(default=30.0, ge=0.5)

    # Blob storage
    blob_backend: Literal["s3", "memory"] = "s3"
    s3_bucket: str = ""
    s3_region: str = "eu-central-1"
    s3_endpoint_url: str = ""
    s3_prefix: str = "headers/"
    s3_public_base_url: str = ""
    s3_acl: str = "public-read"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""

    # Batch policy
    unit_max_retries: int = Field(default=0, ge=0)
    unit_retry_backoff_s: float = Field(default=0.0, ge=0.0)

    model_config = SettingsConfigDict(
        env_prefix="HEADER_FORGE_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def resolved_database_url(self) -> str:
        return self.database_url or os.getenv("DATABASE_URL", "")

    def resolved_gemini_api_key(self) -> str:
        return self.gemini_api_key or os.getenv("GEMINI_API_KEY", "")

    def resolved_openai_api_key(self) -> str:
        return self.openai_api_key or os.getenv("OPENAI_API_KEY", "")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
