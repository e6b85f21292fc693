from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (default uses docker-compose service name)
    database_url: str = "postgresql+psycopg2://coursedesk:coursedesk_dev@db:5432/coursedesk"

    # App settings
    app_name: str = "Coursedesk"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = [
        "http://localhost:3000",  # Local Next.js development
        "https://localhost:3000",
    ]

    # Identity gateway: bearer tokens are JWTs signed by the identity provider
    auth_jwt_secret: str = ""
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: Optional[str] = None

    # Blob storage for course materials
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "us-east-1"
    aws_s3_bucket_name: str = "coursedesk-materials"
    aws_s3_max_file_size_mb: int = 50
    aws_s3_public_base_url: str = ""  # Defaults to the bucket's virtual-hosted URL

    # LLM API Keys (optional, summarization checks before use)
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    summary_max_chars: int = 30000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
