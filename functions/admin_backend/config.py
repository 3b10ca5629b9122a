"""
Configuration and settings for the admin backend.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASELINE_PATH = Path(__file__).resolve().parent / "data" / "default_data.json"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # S3-compatible storage
    bucket_name: str = Field(default="rtmcs", validation_alias="BUCKET_NAME")
    s3_endpoint: Optional[str] = Field(default=None, validation_alias="S3_ENDPOINT")
    s3_region: Optional[str] = Field(default=None, validation_alias="S3_REGION")
    aws_access_key_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ACCESS_KEY", "AWS_ACCESS_KEY_ID"),
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SECRET_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY"),
    )
    upload_url_expires_seconds: int = Field(default=60 * 60)

    # Object keys for the persisted dataset
    data_key: str = Field(default="data/index.json")
    version_key: str = Field(default="data/version.json")

    # Auth (defaults are for local development only)
    jwt_secret: str = Field(
        default="dev-only-admin-secret", validation_alias="JWT_SECRET"
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALG")
    jwt_expires_seconds: int = Field(default=60 * 60)
    admin_user: str = Field(default="rtmcs-admin", validation_alias="ADMIN_USER")
    admin_pass: str = Field(default="rtmcs-@57", validation_alias="ADMIN_PASS")

    # Mutation queue / reconciliation
    drain_interval_seconds: float = Field(default=0.5, gt=0)
    remote_sync_mode: Literal["baseline", "fetch"] = Field(
        default="baseline", validation_alias="REMOTE_SYNC_MODE"
    )
    baseline_data_path: Path = Field(
        default=DEFAULT_BASELINE_PATH, validation_alias="BASELINE_DATA_PATH"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="ADMIN_USE_IN_MEMORY_BACKENDS"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
