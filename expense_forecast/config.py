"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Forecast cache store
    database_url: str = "sqlite:///./forecast_cache.db"

    # Transactions API
    transactions_api_base: str = "http://localhost:8001"
    transactions_api_token: Optional[str] = None

    # Gemini oracle
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-pro"
    gemini_temperature: float = 0.7
    gemini_top_k: int = 40
    gemini_top_p: float = 0.95
    gemini_max_output_tokens: int = 1024

    # Service
    service_name: str = "expense-forecast"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    oracle_timeout_seconds: float = 20.0

    # Forecasting
    lookback_months: int = 6
    currency: str = "RUB"


settings = Settings()
