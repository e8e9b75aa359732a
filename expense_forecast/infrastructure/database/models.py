"""SQLAlchemy ORM models for the forecast cache store"""

from sqlalchemy import Column, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ForecastCacheEntry(Base):
    """Serialized forecast stored under forecast_{PERIOD}_{YYYY-MM-DD}"""

    __tablename__ = "forecast_cache"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
