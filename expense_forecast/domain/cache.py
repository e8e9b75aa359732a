"""Per-day forecast cache keyed by (period, calendar date)"""

import json
import logging
from datetime import date
from typing import Optional

from expense_forecast.domain.exceptions import CacheUnavailableError
from expense_forecast.domain.models import Forecast, ForecastPeriod
from expense_forecast.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "forecast_"


def cache_key(period: ForecastPeriod, today: date) -> str:
    return f"{KEY_PREFIX}{period.value}_{today.isoformat()}"


class ForecastCache:
    """
    Last forecast per period for the current day.

    Entries expire by key mismatch: a new calendar day misses for every
    period. Store failures never propagate; reads degrade to misses and
    writes are dropped.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, period: ForecastPeriod, today: date) -> Optional[Forecast]:
        key = cache_key(period, today)
        try:
            raw = self.store.get(key)
        except CacheUnavailableError as e:
            logger.warning(f"Forecast cache read failed, treating as miss: {e}", extra={"cache_key": key})
            return None

        if raw is None:
            return None

        try:
            return Forecast.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError, ArithmeticError) as e:
            logger.warning(f"Discarding undecodable cached forecast: {e}", extra={"cache_key": key})
            return None

    def put(self, period: ForecastPeriod, today: date, forecast: Forecast) -> None:
        key = cache_key(period, today)
        try:
            self.store.set(key, json.dumps(forecast.to_dict(), ensure_ascii=False))
        except CacheUnavailableError as e:
            logger.error(f"Forecast cache write failed: {e}", extra={"cache_key": key})

    def clear(self) -> int:
        """Drop every cached forecast, for all periods and days"""
        try:
            return self.store.delete_prefix(KEY_PREFIX)
        except CacheUnavailableError as e:
            logger.error(f"Forecast cache clear failed: {e}")
            return 0
