"""All settings, loaded from the .env file."""
from functools import lru_cache

from pydantic_settings import BaseSettings

APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    # App
    app_name: str = "SolarQuote"
    app_url: str = "http://localhost:8000"
    environment: str = "development"  # development | production
    database_url: str = "sqlite:///./solarquote.db"
    log_level: str = "INFO"

    # Sessions
    session_cookie_name: str = "session_token"
    session_ttl_days: int = 7

    # Page entry redirects
    login_path: str = "/login"
    unauthorized_path: str = "/unauthorized"

    # Marketplace behavior
    notification_feed_limit: int = 20
    comparison_min_quotations: int = 2

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"
    rate_limit_auth: str = "10/minute"
    rate_limit_storage_uri: str = ""

    # Optional admin seed (created on startup if both are set)
    admin_email: str = ""
    admin_password: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
