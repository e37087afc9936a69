"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "Rozgaar_Setu"

    # JWT Auth (tokens are issued by the identity provider, we only verify them)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Content storage (S3)
    aws_region: str = "us-east-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    s3_bucket_name: str = "job-portal-resumes"
    s3_public_base_url: Optional[str] = None
    resume_folder: str = "Job_Seekers_Resume"
    storage_connect_timeout: float = 5.0
    storage_read_timeout: float = 30.0
    storage_max_attempts: int = 3

    # Uploads
    max_resume_size_mb: int = 5

    # App
    frontend_url: str = "*"
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    debug: bool = True

    @property
    def max_resume_size_bytes(self) -> int:
        return self.max_resume_size_mb * 1024 * 1024

    @property
    def storage_base_url(self) -> str:
        """Public URL prefix for stored objects."""
        if self.s3_public_base_url:
            return self.s3_public_base_url.rstrip("/")
        return f"https://{self.s3_bucket_name}.s3.{self.aws_region}.amazonaws.com"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
