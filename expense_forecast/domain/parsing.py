"""Oracle response parsing - extract, validate and repair a JSON forecast from free text"""

import json
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from expense_forecast.domain.models import (
    Forecast,
    ForecastPeriod,
    ForecastSource,
    ParseFailure,
    ParseFailureReason,
    Trend,
)

DEFAULT_CONFIDENCE = 70
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100

TREND_SYNONYMS = {
    "increasing": Trend.INCREASING,
    "increase": Trend.INCREASING,
    "up": Trend.INCREASING,
    "upward": Trend.INCREASING,
    "rising": Trend.INCREASING,
    "growing": Trend.INCREASING,
    "decreasing": Trend.DECREASING,
    "decrease": Trend.DECREASING,
    "down": Trend.DECREASING,
    "downward": Trend.DECREASING,
    "falling": Trend.DECREASING,
    "declining": Trend.DECREASING,
    "stable": Trend.STABLE,
    "flat": Trend.STABLE,
    "steady": Trend.STABLE,
}

EXCERPT_LENGTH = 200


def extract_json_block(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring of text, or None.

    Uses a brace-depth scan so nested objects are kept whole and braces inside
    JSON string literals are ignored. An opening brace that never balances is
    skipped and the scan resumes at the next one.
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            return text[start:end + 1]
        start = text.find("{", start + 1)
    return None


def _balanced_end(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Numbers and numeric strings become finite Decimals; anything else is None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None


def _to_amount(value: Any) -> Optional[Decimal]:
    """Like _to_decimal, but also rejects values too large to serialize as a JSON number"""
    number = _to_decimal(value)
    if number is None or math.isinf(float(number)):
        return None
    return number


def _parse_trend(value: Any) -> Trend:
    if isinstance(value, str):
        return TREND_SYNONYMS.get(value.strip().lower(), Trend.STABLE)
    return Trend.STABLE


def _parse_confidence(value: Any) -> int:
    number = _to_decimal(value)
    if number is None:
        return DEFAULT_CONFIDENCE
    clamped = min(max(number, Decimal(MIN_CONFIDENCE)), Decimal(MAX_CONFIDENCE))
    return int(clamped.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _parse_category_forecasts(value: Any) -> Dict[str, Decimal]:
    if not isinstance(value, dict):
        return {}
    forecasts = {}
    for category, amount in value.items():
        number = _to_amount(amount)
        if number is not None:
            forecasts[str(category)] = max(number, Decimal("0"))
    return forecasts


def _parse_strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def parse_forecast_response(
    raw_text: str,
    period: ForecastPeriod,
    generated_at: Optional[datetime] = None,
) -> Union[Forecast, ParseFailure]:
    """
    Turn oracle free text into a Forecast.

    Hard failures (returned as ParseFailure, caller must fall back):
    - NO_JSON_FOUND: no balanced {...} block in the text
    - INVALID_JSON: the block does not decode
    - MISSING_TOTAL: totalForecast absent or not numeric

    Every other field is repaired with a default. source is always AI.
    """
    excerpt = (raw_text or "")[:EXCERPT_LENGTH]

    block = extract_json_block(raw_text or "")
    if block is None:
        return ParseFailure(ParseFailureReason.NO_JSON_FOUND, "no JSON object in response", excerpt)

    try:
        payload = json.loads(block, parse_float=Decimal)
    except (ValueError, RecursionError) as e:
        return ParseFailure(ParseFailureReason.INVALID_JSON, str(e) or type(e).__name__, excerpt)

    total = _to_amount(payload.get("totalForecast"))
    if total is None:
        return ParseFailure(ParseFailureReason.MISSING_TOTAL, "totalForecast missing or not numeric", excerpt)

    return Forecast(
        period=period,
        total_forecast=max(total, Decimal("0")),
        category_forecasts=_parse_category_forecasts(payload.get("categoryForecasts")),
        trend=_parse_trend(payload.get("trend")),
        confidence=_parse_confidence(payload.get("confidence")),
        recommendations=_parse_strings(payload.get("recommendations")),
        insights=_parse_strings(payload.get("insights")),
        generated_at=generated_at or datetime.now(timezone.utc),
        source=ForecastSource.AI,
    )
