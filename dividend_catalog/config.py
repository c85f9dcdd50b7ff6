"""Configuration management for Dividend Catalog"""
import secrets
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields not defined in Settings
    )

    # Application
    env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Store
    # Admin flag given to newly registered users; the bootstrap admin below is always admin
    default_user_is_admin: bool = False
    seed_sample_data: bool = True

    # Bootstrap admin, created at startup when both are set
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    # Tokens
    jwt_secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7


settings = Settings()
