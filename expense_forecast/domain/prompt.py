"""Prompt rendering for the forecast oracle"""

from typing import List

from expense_forecast.domain.models import Aggregate, ForecastPeriod, PeriodBucket

PERIOD_NAMES = {
    ForecastPeriod.WEEK: "week",
    ForecastPeriod.MONTH: "month",
    ForecastPeriod.YEAR: "year",
}

RESPONSE_FORMAT = """{
  "totalForecast": <number, total expected spending for the period, >= 0>,
  "categoryForecasts": {
    "<category name>": <number, >= 0>
  },
  "trend": "INCREASING" | "DECREASING" | "STABLE",
  "confidence": <integer from 0 to 100>,
  "recommendations": ["<recommendation>", "..."],
  "insights": ["<insight>", "..."]
}"""


def _bucket_lines(label: str, buckets: List[PeriodBucket], currency: str) -> List[str]:
    return [
        f"{label} {i + 1}: {b.total:.2f} {currency} ({b.count} transactions)"
        for i, b in enumerate(buckets)
    ]


def build_forecast_prompt(aggregate: Aggregate, period: ForecastPeriod, currency: str = "RUB") -> str:
    """Render an aggregate into a deterministic prompt asking for a JSON forecast"""
    period_name = PERIOD_NAMES[period]

    category_lines = [
        f"- {share.category}: {share.amount:.2f} {currency} ({share.percentage_of_total:.1f}%)"
        for share in aggregate.top_categories
    ] or ["- (no categories)"]

    lines = [
        f"Analyze the user's spending history and forecast their expenses for the next {period_name}.",
        "",
        "SPENDING DATA:",
        f"- Total spent: {aggregate.total_amount:.2f} {currency}",
        f"- Number of transactions: {aggregate.transaction_count}",
        f"- Average transaction: {aggregate.average_transaction:.2f} {currency}",
        "",
        "TOP SPENDING CATEGORIES:",
        *category_lines,
        "",
        "WEEKLY TOTALS (most recent first, last 4 weeks):",
        *_bucket_lines("Week", aggregate.weekly_buckets, currency),
        "",
        "MONTHLY TOTALS (most recent first, last 4 months of 30 days):",
        *_bucket_lines("Month", aggregate.monthly_buckets, currency),
        "",
        "TASK:",
        f"Forecast spending for the next {period_name}, taking into account:",
        "1. Trends across the weekly and monthly totals",
        "2. Regular payments",
        "3. Changes in spending per category",
        "4. Recommendations for optimizing the budget",
        "",
        "RESPONSE FORMAT (strict JSON):",
        RESPONSE_FORMAT,
        "",
        "Use only the trend values INCREASING, DECREASING or STABLE.",
        "Respond with the JSON object only, without any additional text.",
    ]
    return "\n".join(lines)
