"""Prometheus metrics for monitoring forecast provenance, cache efficiency, and oracle health"""

from prometheus_client import Counter, Histogram

from expense_forecast.domain.models import Forecast

# Forecast metrics
forecast_counter = Counter(
    "expense_forecast_total",
    "Forecasts served",
    ["period", "source", "cached"],  # source: AI | FALLBACK
)

cache_lookup_counter = Counter(
    "forecast_cache_lookups_total",
    "Forecast cache lookups",
    ["result"],  # hit | miss
)

# Oracle metrics
oracle_latency_histogram = Histogram(
    "forecast_oracle_latency_seconds",
    "Forecast oracle response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

oracle_failure_counter = Counter(
    "forecast_oracle_failures_total",
    "Oracle calls that ended in a fallback forecast",
    ["reason"],  # unavailable | error | NO_JSON_FOUND | INVALID_JSON | MISSING_TOTAL
)

# Transactions API metrics
transaction_fetch_failures_counter = Counter(
    "transaction_fetch_failures_total",
    "Failed transactions API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_forecast(forecast: Forecast, cached: bool) -> None:
    """Record which path produced a served forecast"""
    forecast_counter.labels(
        period=forecast.period.value,
        source=forecast.source.value,
        cached="true" if cached else "false",
    ).inc()


def record_cache_lookup(hit: bool) -> None:
    cache_lookup_counter.labels(result="hit" if hit else "miss").inc()
