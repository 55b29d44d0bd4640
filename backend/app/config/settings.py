"""
Application settings and configuration.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application configuration using environment variables."""
    
    # Database
    DATABASE_URL: str = "postgresql://localhost:5432/shamba_fresh"
    
    # Redis (for Celery)
    REDIS_URL: str = "redis://localhost:6379/0"
    
    # API
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    
    # Auth
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ADMIN_EMAILS: str = ""  # Comma separated
    
    # Storefront defaults
    TAX_RATE: float = 0.16
    LOW_STOCK_THRESHOLD: int = 10
    DEFAULT_CATEGORY: str = "Vegetables"
    DEFAULT_UNIT: str = "kg"
    
    # M-Pesa (Daraja)
    MPESA_ENVIRONMENT: str = "sandbox"
    MPESA_CONSUMER_KEY: Optional[str] = None
    MPESA_CONSUMER_SECRET: Optional[str] = None
    MPESA_SHORTCODE: str = "174379"
    MPESA_PASSKEY: Optional[str] = None
    MPESA_CALLBACK_URL: str = "http://localhost:8000/api/payments/mpesa-callback"
    MPESA_AUTH_URL: Optional[str] = None
    MPESA_STK_PUSH_URL: Optional[str] = None
    
    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash-preview-05-20"
    GEMINI_MAX_RETRIES: int = 3
    CHAT_HISTORY_LIMIT: int = 20
    
    # External APIs
    HTTP_TIMEOUT: int = 30
    
    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def admin_emails(self) -> List[str]:
        return [e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()]

    @property
    def mpesa_base_url(self) -> str:
        if self.MPESA_ENVIRONMENT == "production":
            return "https://api.safaricom.co.ke"
        return "https://sandbox.safaricom.co.ke"


settings = Settings()
