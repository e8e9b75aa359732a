"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List


class TransactionKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class ForecastPeriod(str, Enum):
    WEEK = "WEEK"
    MONTH = "MONTH"
    YEAR = "YEAR"

    @classmethod
    def from_value(cls, value: str) -> "ForecastPeriod":
        """Case-insensitive lookup ("week", "Month", "YEAR")"""
        try:
            return cls(value.strip().upper())
        except (AttributeError, ValueError) as e:
            raise ValueError(f"Unknown forecast period: {value!r}") from e


class Trend(str, Enum):
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    STABLE = "STABLE"


class ForecastSource(str, Enum):
    AI = "AI"
    FALLBACK = "FALLBACK"


@dataclass(frozen=True)
class Transaction:
    """Transaction record supplied by the transactions API"""

    id: str
    amount: Decimal  # always non-negative
    kind: TransactionKind
    category: str
    occurred_on: date


@dataclass(frozen=True)
class PeriodBucket:
    """Fixed-length spending window; end_date is exclusive"""

    start_date: date
    end_date: date
    total: Decimal
    count: int
    average: Decimal


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: Decimal
    percentage_of_total: Decimal


@dataclass(frozen=True)
class Aggregate:
    """Summary of an expense history used for projection and prompting"""

    total_amount: Decimal
    transaction_count: int
    average_transaction: Decimal
    category_totals: Dict[str, Decimal]
    top_categories: List[CategoryShare]
    weekly_buckets: List[PeriodBucket]
    monthly_buckets: List[PeriodBucket]
    quarterly_buckets: List[PeriodBucket]


@dataclass(frozen=True)
class Forecast:
    """Spending forecast for one period"""

    period: ForecastPeriod
    total_forecast: Decimal
    category_forecasts: Dict[str, Decimal]
    trend: Trend
    confidence: int
    recommendations: List[str]
    insights: List[str]
    generated_at: datetime
    source: ForecastSource

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase field names the client screens read.

        Amounts are kept as strings so a cached forecast decodes to the same
        Decimal values.
        """
        return {
            "period": self.period.value,
            "totalForecast": str(self.total_forecast),
            "categoryForecasts": {name: str(amount) for name, amount in self.category_forecasts.items()},
            "trend": self.trend.value,
            "confidence": self.confidence,
            "recommendations": list(self.recommendations),
            "insights": list(self.insights),
            "generatedAt": self.generated_at.isoformat(),
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Forecast":
        return cls(
            period=ForecastPeriod(data["period"]),
            total_forecast=Decimal(str(data["totalForecast"])),
            category_forecasts={
                name: Decimal(str(amount)) for name, amount in data.get("categoryForecasts", {}).items()
            },
            trend=Trend(data["trend"]),
            confidence=int(data["confidence"]),
            recommendations=list(data.get("recommendations", [])),
            insights=list(data.get("insights", [])),
            generated_at=datetime.fromisoformat(data["generatedAt"]),
            source=ForecastSource(data["source"]),
        )


class ParseFailureReason(str, Enum):
    NO_JSON_FOUND = "NO_JSON_FOUND"
    INVALID_JSON = "INVALID_JSON"
    MISSING_TOTAL = "MISSING_TOTAL"


@dataclass(frozen=True)
class ParseFailure:
    """Oracle text could not be turned into a usable forecast"""

    reason: ParseFailureReason
    detail: str = ""
    raw_excerpt: str = field(default="", repr=False)
