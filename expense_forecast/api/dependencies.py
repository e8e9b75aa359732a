"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from expense_forecast.config import settings
from expense_forecast.domain.cache import ForecastCache
from expense_forecast.infrastructure.clients.gemini import GeminiOracle
from expense_forecast.infrastructure.clients.transactions import TransactionsClient
from expense_forecast.infrastructure.database.repositories import ForecastCacheRepository
from expense_forecast.infrastructure.database.session import get_db
from expense_forecast.services.forecasting import ForecastService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_transaction_source() -> TransactionsClient:
    """Provide transactions API client instance"""
    return TransactionsClient()


def get_forecast_oracle() -> GeminiOracle:
    """Provide Gemini oracle client instance"""
    return GeminiOracle()


def get_forecast_cache(db: Session = Depends(get_db)) -> ForecastCache:
    """Provide forecast cache over the request's database session"""
    return ForecastCache(ForecastCacheRepository(db))


def get_forecast_service(
    source: TransactionsClient = Depends(get_transaction_source),
    oracle: GeminiOracle = Depends(get_forecast_oracle),
    cache: ForecastCache = Depends(get_forecast_cache),
) -> ForecastService:
    """Assemble the forecast orchestrator from its collaborators"""
    return ForecastService(
        source=source,
        oracle=oracle,
        cache=cache,
        lookback_months=settings.lookback_months,
        currency=settings.currency,
    )
