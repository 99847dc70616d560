"""
Configuration settings for Site Service
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Sales Training Site Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8010

    # Content backend (external REST API)
    CONTENT_API_URL: str = "http://localhost:3001/api"
    HTTP_TIMEOUT: float = 10.0
    HTTP_CONNECT_TIMEOUT: float = 5.0

    # Listings
    LISTING_PAGE_SIZE: int = 6
    FEATURED_LESSONS_LIMIT: int = 5
    FEATURED_ARTICLES_LIMIT: int = 3
    SEARCH_DEBOUNCE_SECONDS: float = 0.5
    # Drop responses that settle after a newer request was issued
    DISCARD_STALE_RESPONSES: bool = False

    # Locale
    SUPPORTED_LOCALES: List[str] = ["en", "fr"]
    DEFAULT_LOCALE: str = "en"
    LOCALE_COOKIE_NAME: str = "preferredLanguage"
    LOCALE_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365
    VISITOR_COOKIE_NAME: str = "visitorId"

    # Redis (category cache and locale preferences)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 2
    REDIS_PASSWORD: str = ""
    REDIS_ENABLED: bool = True

    # Cache TTL (seconds)
    CATEGORY_CACHE_TTL: int = 600  # 10 minutes
    PREFERENCE_TTL: int = 60 * 60 * 24 * 365

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
