# teamsite/config.py
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./teamsite.db"
    secret_key: str = "change-me"
    admin_password: str = "admin"
    env: Literal["dev", "stage", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"
    access_log: bool = True
    sql_echo: bool = False
    auto_init_db: bool = True
    seed_default_data: bool = True

    # Bearer tokens for the mutation API
    token_ttl_hours: int = 24

    # Image storage settings
    uploads_dir: str = "uploads"
    max_upload_bytes: int = 2 * 1024 * 1024
    image_storage_local: bool = True  # False = S3-compatible bucket
    s3_bucket_name: Optional[str] = None
    s3_region: str = "us-east-1"
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_public_url_base: Optional[str] = None

    # Data manager (client cache) defaults
    api_base_url: str = "http://localhost:8080/api"
    client_timeout_seconds: float = 10.0
    client_max_attempts: int = 3
    client_retry_delay_seconds: float = 1.0

    @property
    def is_dev(self) -> bool:
        return self.env == "dev" or self.debug is True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
