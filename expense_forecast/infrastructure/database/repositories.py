"""Data access layer for cached forecasts"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from expense_forecast.domain.exceptions import CacheUnavailableError
from expense_forecast.infrastructure.database.models import ForecastCacheEntry


class ForecastCacheRepository:
    """Key-value store over the forecast_cache table"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        try:
            entry = self.db.get(ForecastCacheEntry, key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CacheUnavailableError(f"Cache read failed: {e}") from e
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite; last write wins"""
        try:
            self.db.merge(ForecastCacheEntry(key=key, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CacheUnavailableError(f"Cache write failed: {e}") from e

    def delete_prefix(self, prefix: str) -> int:
        try:
            deleted = (
                self.db.query(ForecastCacheEntry)
                .filter(ForecastCacheEntry.key.startswith(prefix, autoescape=True))
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CacheUnavailableError(f"Cache clear failed: {e}") from e
        return deleted
