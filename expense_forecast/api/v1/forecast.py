"""Forecast endpoints - per-period forecasts and cache management"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from expense_forecast.api.dependencies import get_forecast_cache, get_forecast_service, get_request_id
from expense_forecast.api.v1.schemas import CacheClearResponse, ForecastBundleResponse, ForecastResponse
from expense_forecast.domain.cache import ForecastCache
from expense_forecast.domain.models import ForecastPeriod
from expense_forecast.services.forecasting import ForecastService

router = APIRouter()


@router.get("/forecast", response_model=ForecastBundleResponse)
async def get_all_forecasts(service: ForecastService = Depends(get_forecast_service)):
    """
    Forecast the coming week, month and year.

    Transactions are fetched once and shared by all three periods.
    """
    forecasts = await service.get_forecasts()
    return ForecastBundleResponse(
        forecasts=[ForecastResponse.from_forecast(f) for f in forecasts.values()]
    )


@router.get("/forecast/{period}", response_model=ForecastResponse)
async def get_forecast(
    period: str,
    request: Request,
    service: ForecastService = Depends(get_forecast_service),
):
    """
    Forecast spending for one period (week, month or year, any casing).

    Always answers with a forecast; oracle and data problems surface as
    source=FALLBACK rather than as errors.
    """
    try:
        forecast_period = ForecastPeriod.from_value(period)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    forecast = await service.get_forecast(forecast_period)
    logging.debug(
        "Forecast served",
        extra={"request_id": get_request_id(request), "period": forecast_period.value},
    )
    return ForecastResponse.from_forecast(forecast)


@router.delete("/forecast/cache", response_model=CacheClearResponse)
def clear_forecast_cache(cache: ForecastCache = Depends(get_forecast_cache)):
    """Drop all cached forecasts so the next request recomputes them"""
    return CacheClearResponse(cleared=cache.clear())
