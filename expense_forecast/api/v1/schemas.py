"""Pydantic schemas for API responses"""

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from expense_forecast.domain.models import Forecast, ForecastPeriod, ForecastSource, Trend


class ForecastResponse(BaseModel):
    """Forecast as rendered by the client screens (camelCase on the wire)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    period: ForecastPeriod
    total_forecast: float
    category_forecasts: Dict[str, float]
    trend: Trend
    confidence: int
    recommendations: List[str]
    insights: List[str]
    generated_at: datetime
    source: ForecastSource

    @classmethod
    def from_forecast(cls, forecast: Forecast) -> "ForecastResponse":
        return cls(
            period=forecast.period,
            total_forecast=float(forecast.total_forecast),
            category_forecasts={name: float(amount) for name, amount in forecast.category_forecasts.items()},
            trend=forecast.trend,
            confidence=forecast.confidence,
            recommendations=forecast.recommendations,
            insights=forecast.insights,
            generated_at=forecast.generated_at,
            source=forecast.source,
        )


class ForecastBundleResponse(BaseModel):
    """Response for GET /v1/forecast"""

    forecasts: List[ForecastResponse]


class CacheClearResponse(BaseModel):
    """Response for DELETE /v1/forecast/cache"""

    cleared: int
