"""Fallback projector - deterministic forecast that needs no external service"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from expense_forecast.domain.models import (
    Aggregate,
    Forecast,
    ForecastPeriod,
    ForecastSource,
    Trend,
)

PERIOD_MULTIPLIERS: Dict[ForecastPeriod, Decimal] = {
    ForecastPeriod.WEEK: Decimal("0.25"),
    ForecastPeriod.MONTH: Decimal("1"),
    ForecastPeriod.YEAR: Decimal("12"),
}

FALLBACK_CONFIDENCE = 60
INSUFFICIENT_DATA_CONFIDENCE = 0
INSUFFICIENT_DATA_INSIGHT = "Insufficient data for analysis: no expenses recorded in the lookback window"

FALLBACK_RECOMMENDATIONS = [
    "Add more transactions to improve forecast accuracy",
    "Keep an eye on recurring spending in your largest categories",
]

CENT = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def insufficient_data_forecast(
    period: ForecastPeriod,
    generated_at: Optional[datetime] = None,
) -> Forecast:
    """Forecast returned when there is no expense history to project from"""
    return Forecast(
        period=period,
        total_forecast=to_cents(Decimal("0")),
        category_forecasts={},
        trend=Trend.STABLE,
        confidence=INSUFFICIENT_DATA_CONFIDENCE,
        recommendations=["Add transactions to get a spending forecast"],
        insights=[INSUFFICIENT_DATA_INSIGHT],
        generated_at=generated_at or datetime.now(timezone.utc),
        source=ForecastSource.FALLBACK,
    )


def project_fallback_forecast(
    aggregate: Aggregate,
    period: ForecastPeriod,
    currency: str = "RUB",
    generated_at: Optional[datetime] = None,
) -> Forecast:
    """
    Project spending from the monthly buckets of an aggregate.

    Calculation:
    - months_observed = number of monthly buckets with activity (at least 1)
    - average_monthly = sum of monthly bucket totals / months_observed
    - total = average_monthly * period multiplier (week 0.25, month 1, year 12)
    - each category = category total / months_observed * multiplier

    The fallback has no comparative basis, so trend is always STABLE.
    """
    if aggregate.transaction_count == 0:
        return insufficient_data_forecast(period, generated_at)

    multiplier = PERIOD_MULTIPLIERS[period]
    months_observed = max(sum(1 for b in aggregate.monthly_buckets if b.count > 0), 1)
    average_monthly = sum((b.total for b in aggregate.monthly_buckets), Decimal("0")) / months_observed

    category_forecasts = {
        category: to_cents(total / months_observed * multiplier)
        for category, total in aggregate.category_totals.items()
    }

    largest = aggregate.top_categories[0].category if aggregate.top_categories else "Other"

    return Forecast(
        period=period,
        total_forecast=to_cents(average_monthly * multiplier),
        category_forecasts=category_forecasts,
        trend=Trend.STABLE,
        confidence=FALLBACK_CONFIDENCE,
        recommendations=list(FALLBACK_RECOMMENDATIONS),
        insights=[
            f"Average monthly spending is {to_cents(average_monthly):.2f} {currency}",
            f"Largest category is {largest}",
        ],
        generated_at=generated_at or datetime.now(timezone.utc),
        source=ForecastSource.FALLBACK,
    )
