"""
Configuration settings for the Deepmetric course catalog backend.

Uses Pydantic settings management for environment variables and configuration.
"""

from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl, field_validator
import secrets


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Deepmetric Analytics Institute"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Course catalog, enrollment and completion approval for Deepmetric Analytics Institute"

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str = "sqlite:///./deepmetric.db"

    # Storage keys for the persisted records
    STORAGE_KEY_PREFIX: str = "deepmetric_"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str] | str:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Admin settings
    ADMIN_EMAIL: str = "admin@deepmetric.com"

    # Notifications
    NOTIFICATION_TTL_SECONDS: float = 6.0
    EMAIL_OUTBOX_LIMIT: int = 200
    EMAILS_FROM_NAME: str = "Deepmetric Team"

    # Certificates
    CERTIFICATE_ISSUER: str = "Deepmetric Analytics Institute"

    # Generative AI advisor
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    ADVISOR_TEMPERATURE: float = 0.7
    ADVISOR_MAX_WORDS: int = 100
    SUGGESTED_TAG_COUNT: int = 5

    # Catalog
    CURRENCY: str = "GHC"
    SEED_DEFAULT_COURSES: bool = True

    # Development settings
    DEBUG: bool = False
    TESTING: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def advisor_enabled(self) -> bool:
        """Check if the generative AI client can be configured."""
        return bool(self.GEMINI_API_KEY)

    def storage_key(self, name: str) -> str:
        """Get the full storage key for a logical record name."""
        return f"{self.STORAGE_KEY_PREFIX}{name}"


# Create global settings instance
settings = Settings()
