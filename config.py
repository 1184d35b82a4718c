"""
Settings for the Portfolio CMS API.

Everything comes from the environment (or a local .env file).
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "super-secret-key-change"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = "development"
    debug: bool = False
    cors_origins: str = "*"

    # Database
    mongodb_uri: Optional[str] = None
    database_name: str = "portfolio"

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    reset_token_expire_minutes: int = 60
    admin_email: str = "admin@portfolio.dev"
    admin_password: str = "admin123"
    # Takes precedence over admin_password when set
    admin_password_hash: Optional[str] = None

    # Translation (English -> Arabic)
    translation_enabled: bool = True
    translation_url: str = "https://translate.googleapis.com/translate_a/single"
    translation_timeout: float = 10.0

    # Image host
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None

    # Outbound email (AWS SES)
    aws_region: str = "us-east-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    email_from: Optional[str] = None

    # Rate limiting
    rate_limit: str = "100/15minutes"
    rate_limit_enabled: bool = True

    @model_validator(mode="after")
    def _require_jwt_secret_in_production(self) -> "Settings":
        if self.is_production and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def use_cloudinary(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    @property
    def use_ses(self) -> bool:
        return bool(
            self.aws_access_key_id and self.aws_secret_access_key and self.email_from
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
