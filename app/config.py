"""
Configuration management using Pydantic Settings.
Loads environment variables from .env file.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Security (signs the session cookie; no auth tokens are issued)
    SECRET_KEY: str = (
        "dev-secret-key-change-in-production-must-be-at-least-32-characters-long"
    )
    SESSION_MAX_AGE: int = 3600

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    # Google Sign-In Configuration
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/auth/google/callback"
    GOOGLE_SCOPES: str = "email profile"
    GOOGLE_SIGN_IN_TIMEOUT: float = 30.0

    # Form Configuration
    MIN_PASSWORD_LENGTH: int = 6
    NOTIFICATION_SECONDS: float = 4.0

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def google_scopes_list(self) -> List[str]:
        """Parse requested OAuth scopes from space-separated string."""
        return [scope for scope in self.GOOGLE_SCOPES.split() if scope]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
