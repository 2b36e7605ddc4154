"""
Application settings loaded from environment variables.

Uses pydantic-settings for type-safe configuration with .env file support.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global application settings."""

    # App
    APP_NAME: str = "Ripe FX Quote"
    APP_ENV: str = "development"
    DEBUG: bool = True

    # FX rate acquisition
    FX_REFRESH_INTERVAL_SECONDS: float = 120
    FX_REFRESH_ON_STARTUP: bool = True
    FX_STALE_THRESHOLD_SECONDS: float = 600
    FX_PRIMARY_TIMEOUT_SECONDS: float = 5.0
    FX_FALLBACK_TIMEOUT_SECONDS: float = 5.0
    FX_CUSTOMER_SPREAD_PERCENT: float = 0.3

    # Provider endpoints (public, no API key)
    COINGECKO_URL: str = (
        "https://api.coingecko.com/api/v3/simple/price"
        "?ids=usd-coin,tether&vs_currencies=php,thb,idr,myr,usd"
    )
    EXCHANGERATE_API_URL: str = "https://api.exchangerate-api.com/v4/latest/USD"
    OPEN_ER_API_URL: str = "https://open.er-api.com/v6/latest/USD"
    FRANKFURTER_URL: str = "https://api.frankfurter.app/latest?from=USD&to=PHP,THB,IDR,MYR"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
