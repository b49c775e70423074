# ==================================================================================
# core/config.py: FastAPI Configuration (SQLModel + SendGrid + JWT, Pydantic v2)
# ==================================================================================
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import EmailStr, ValidationError
from typing import List, Optional
import sys

from dotenv import load_dotenv


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    DATABASE_URL: str = "sqlite:///./pmboard.db"

    # ------------------------
    # SECURITY CONFIG
    # ------------------------
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    EPHEMERAL_TOKEN_EXPIRE_MINUTES: int = 5

    # ------------------------
    # SENDGRID EMAIL CONFIG
    # ------------------------
    SENDGRID_API_KEY: Optional[str] = None
    MAIL_FROM: Optional[EmailStr] = None  # Example: "noreply@pmboard.io"

    # ------------------------
    # FRONTEND CONFIG
    # ------------------------
    FRONTEND_URL: str = "http://localhost:5173"
    PRODUCTION_ORIGIN: str = "https://pmboard.io"

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: str = "development"  # 'development' | 'production' | 'test'
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def IS_PRODUCTION(self) -> bool:
        """Convenience helper to check if running in production"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Production only trusts the public frontend; dev trusts the Vite server."""
        if self.IS_PRODUCTION:
            return [self.PRODUCTION_ORIGIN]
        return [self.FRONTEND_URL, "http://127.0.0.1:5173"]

    # ------------------------
    # Pydantic v2 Settings
    # ------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# ------------------------
# Global Settings Loader
# ------------------------
# .env goes into os.environ first so non-Settings readers see the same values
load_dotenv()

try:
    settings = Settings()
except ValidationError as e:
    print("❌ Environment configuration error: missing or invalid settings!")
    print(e)
    sys.exit(1)
