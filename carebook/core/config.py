"""Application configuration from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    # App
    app_name: str = "CareBook"
    debug: bool = True
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://carebook:carebook@db:5432/carebook"
    database_echo: bool = False

    # Calendar day used by the duplicate-booking guard
    local_timezone: str = "Asia/Dhaka"

    # Service catalog (static reference data)
    catalog_path: str = str(DATA_DIR / "services.json")
    catalog_timeout_seconds: float = 2.0

    # Auth
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 30
    jwt_algorithm: str = "HS256"

    # Email / SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_from: str = "noreply@carebook.io"
    frontend_url: str = "http://localhost:3000"
    notifier_timeout_seconds: float = 10.0

    # Stripe (test mode)
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_currency: str = "bdt"
    gateway_timeout_seconds: float = 15.0

    model_config = {"env_prefix": "CARE_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
