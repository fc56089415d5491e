"""
Core settings and environment variables for Fintrack.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Fintrack"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # AI Configuration
    AI_PROVIDER: str = "mock"  # "mock", "openai" or "gemini" (case-insensitive)
    AI_TIMEOUT_SECONDS: float = 20.0
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: Optional[str] = None  # Pin a model, e.g. "models/gemini-2.5-flash"

    # Rate limiter (in-process token buckets)
    RATE_LIMIT_MAX_BUCKETS: int = 10000
    RATE_LIMIT_IDLE_SECONDS: int = 3600

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    def cors_origins(self) -> List[str]:
        """Split CORS_ORIGINS into a clean list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
