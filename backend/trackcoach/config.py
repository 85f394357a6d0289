# backend/trackcoach/config.py

"""
Centralized configuration.

All environment variables are read here, from the process environment or a
local .env file.
"""
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database
    DATABASE_URL: Optional[str] = Field(default=None)
    SQL_ECHO: bool = Field(default=False)

    # JWT authentication
    SECRET_KEY: Optional[str] = Field(default=None)
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # json or text

    # Comma-separated list of allowed origins, "*" for any
    CORS_ORIGINS: str = Field(default="*")

    # Parent invites
    INVITE_CODE_PREFIX: str = Field(default="COACH")
    INVITE_EXPIRY_DAYS: Optional[int] = Field(default=None, ge=1)

    ENVIRONMENT: str = Field(default="development")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
