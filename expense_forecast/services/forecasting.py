"""Forecast orchestration - fetch, aggregate, cache, consult the oracle, fall back"""

import asyncio
import logging
import time
from datetime import date
from typing import Callable, Dict, Iterable, Optional

from expense_forecast.domain.aggregation import aggregate_transactions, select_expenses
from expense_forecast.domain.cache import ForecastCache
from expense_forecast.domain.exceptions import OracleUnavailableError, TransactionFetchError
from expense_forecast.domain.models import Aggregate, Forecast, ForecastPeriod, ParseFailure
from expense_forecast.domain.parsing import parse_forecast_response
from expense_forecast.domain.ports import ForecastOracle, TransactionSource
from expense_forecast.domain.projection import project_fallback_forecast
from expense_forecast.domain.prompt import build_forecast_prompt
from expense_forecast.infrastructure.observability.logging import log_forecast
from expense_forecast.infrastructure.observability.metrics import (
    oracle_failure_counter,
    oracle_latency_histogram,
    record_cache_lookup,
    record_forecast,
    transaction_fetch_failures_counter,
)
from expense_forecast.utils.date_utils import subtract_months

logger = logging.getLogger(__name__)


class ForecastService:
    """
    Produces a spending forecast per period. Never raises.

    Flow per period:
    1. Fetch transactions for the lookback window (errors mean no data)
    2. Aggregate expenses
    3. Return the cached forecast for (period, today) if there is one
    4. No expenses: insufficient-data fallback
    5. Build prompt and make a single oracle call
    6. Parse the response; oracle or parse failure falls back to projection
    7. Cache and return the result
    """

    def __init__(
        self,
        source: TransactionSource,
        oracle: ForecastOracle,
        cache: ForecastCache,
        lookback_months: int = 6,
        currency: str = "RUB",
        clock: Callable[[], date] = date.today,
    ):
        self.source = source
        self.oracle = oracle
        self.cache = cache
        self.lookback_months = lookback_months
        self.currency = currency
        self.clock = clock

    async def get_forecast(self, period: ForecastPeriod, today: Optional[date] = None) -> Forecast:
        today = today or self.clock()
        aggregate = await self._load_aggregate(today)
        return await self._forecast_for_period(aggregate, period, today)

    async def get_forecasts(
        self,
        periods: Iterable[ForecastPeriod] = tuple(ForecastPeriod),
        today: Optional[date] = None,
    ) -> Dict[ForecastPeriod, Forecast]:
        """Forecast several periods from a single transaction fetch"""
        today = today or self.clock()
        aggregate = await self._load_aggregate(today)
        periods = list(periods)
        forecasts = await asyncio.gather(
            *(self._forecast_for_period(aggregate, period, today) for period in periods)
        )
        return dict(zip(periods, forecasts))

    async def _load_aggregate(self, today: date) -> Aggregate:
        since = subtract_months(today, self.lookback_months)
        try:
            transactions = await self.source.fetch(since)
        except TransactionFetchError as e:
            transaction_fetch_failures_counter.inc()
            logger.warning(f"Transactions unavailable, forecasting without data: {e}")
            transactions = []
        except Exception:
            transaction_fetch_failures_counter.inc()
            logger.exception("Unexpected error fetching transactions, forecasting without data")
            transactions = []

        expenses = select_expenses(transactions, since, today)
        return aggregate_transactions(expenses, today)

    async def _forecast_for_period(self, aggregate: Aggregate, period: ForecastPeriod, today: date) -> Forecast:
        start_time = time.time()

        cached = self.cache.get(period, today)
        record_cache_lookup(cached is not None)
        if cached is not None:
            self._finish(cached, True, aggregate, start_time)
            return cached

        if aggregate.transaction_count == 0:
            forecast = project_fallback_forecast(aggregate, period, self.currency)
        else:
            forecast = await self._consult_oracle(aggregate, period)

        self.cache.put(period, today, forecast)
        self._finish(forecast, False, aggregate, start_time)
        return forecast

    async def _consult_oracle(self, aggregate: Aggregate, period: ForecastPeriod) -> Forecast:
        prompt = build_forecast_prompt(aggregate, period, self.currency)

        try:
            with oracle_latency_histogram.time():
                raw_text = await self.oracle.complete(prompt)
        except OracleUnavailableError as e:
            oracle_failure_counter.labels(reason="unavailable").inc()
            logger.warning(f"Forecast oracle unavailable, using fallback: {e}", extra={"period": period.value})
            return project_fallback_forecast(aggregate, period, self.currency)
        except Exception:
            oracle_failure_counter.labels(reason="error").inc()
            logger.exception("Forecast oracle call failed, using fallback", extra={"period": period.value})
            return project_fallback_forecast(aggregate, period, self.currency)

        result = parse_forecast_response(raw_text, period)
        if isinstance(result, ParseFailure):
            oracle_failure_counter.labels(reason=result.reason.value).inc()
            logger.warning(
                f"Unusable oracle response ({result.reason.value}), using fallback: {result.detail}",
                extra={"period": period.value, "response_excerpt": result.raw_excerpt},
            )
            return project_fallback_forecast(aggregate, period, self.currency)

        return result

    def _finish(self, forecast: Forecast, cached: bool, aggregate: Aggregate, start_time: float) -> None:
        duration_ms = (time.time() - start_time) * 1000
        record_forecast(forecast, cached)
        log_forecast(forecast, cached, aggregate.transaction_count, duration_ms)
