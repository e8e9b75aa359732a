"""Unit tests for oracle response parsing"""

import json
from decimal import Decimal
import pytest
from expense_forecast.domain.models import (
    Forecast,
    ForecastPeriod,
    ForecastSource,
    ParseFailure,
    ParseFailureReason,
    Trend,
)
from expense_forecast.domain.parsing import extract_json_block, parse_forecast_response
from conftest import VALID_ORACLE_RESPONSE


def test_extract_json_block_keeps_nested_objects():
    text = 'Sure! {"a": {"b": {"c": 1}}, "d": 2} and then {"e": 3}'
    assert extract_json_block(text) == '{"a": {"b": {"c": 1}}, "d": 2}'


def test_extract_json_block_ignores_braces_in_strings():
    text = 'prefix {"note": "use } and { freely", "n": 1} suffix'
    assert json.loads(extract_json_block(text)) == {"note": "use } and { freely", "n": 1}


def test_extract_json_block_handles_escaped_quotes():
    text = r'{"note": "say \"}\" loudly", "n": 1}'
    assert json.loads(extract_json_block(text)) == {"note": 'say "}" loudly', "n": 1}


def test_extract_json_block_skips_unbalanced_opening_brace():
    assert extract_json_block('oops { not closed {"n": 1}') == '{"n": 1}'


def test_extract_json_block_none_when_absent():
    assert extract_json_block("no braces here") is None
    assert extract_json_block("only { an opening") is None


def test_parse_well_formed_response_round_trips():
    """Test every provided field comes through unchanged"""
    result = parse_forecast_response(VALID_ORACLE_RESPONSE, ForecastPeriod.MONTH)

    assert isinstance(result, Forecast)
    assert result.period == ForecastPeriod.MONTH
    assert result.total_forecast == Decimal("450.5")
    assert result.category_forecasts == {"Food": Decimal("300"), "Transport": Decimal("150.5")}
    assert result.trend == Trend.INCREASING
    assert result.confidence == 85
    assert result.recommendations == ["Cook at home more often"]
    assert result.insights == ["Food spending grew over the last month"]
    assert result.source == ForecastSource.AI


def test_parse_markdown_fenced_json():
    text = '```json\n{"totalForecast": 99.99, "trend": "decreasing"}\n```'
    result = parse_forecast_response(text, ForecastPeriod.WEEK)

    assert result.total_forecast == Decimal("99.99")
    assert result.trend == Trend.DECREASING


def test_parse_no_json_found():
    """Scenario B: plain refusal text"""
    result = parse_forecast_response("I cannot help with that", ForecastPeriod.MONTH)

    assert isinstance(result, ParseFailure)
    assert result.reason == ParseFailureReason.NO_JSON_FOUND


def test_parse_invalid_json():
    result = parse_forecast_response("{totalForecast: 100, 'trend': up}", ForecastPeriod.MONTH)

    assert isinstance(result, ParseFailure)
    assert result.reason == ParseFailureReason.INVALID_JSON


@pytest.mark.parametrize(
    "raw",
    [
        '{"totalForecast": 1' + "0" * 5000 + "}",
        '{"insights": ' + "[" * 100000 + "]" * 100000 + "}",
    ],
)
def test_parse_oversized_json_is_a_failure(raw):
    """Test oversized integers and runaway nesting come back as failures, not exceptions"""
    result = parse_forecast_response(raw, ForecastPeriod.MONTH)

    assert isinstance(result, ParseFailure)


@pytest.mark.parametrize(
    "payload",
    [
        {"trend": "STABLE"},
        {"totalForecast": "a lot"},
        {"totalForecast": None},
        {"totalForecast": True},
        {"totalForecast": [100]},
    ],
)
def test_parse_missing_total(payload):
    result = parse_forecast_response(json.dumps(payload), ForecastPeriod.MONTH)

    assert isinstance(result, ParseFailure)
    assert result.reason == ParseFailureReason.MISSING_TOTAL


def test_parse_non_finite_total_is_missing():
    result = parse_forecast_response('{"totalForecast": NaN}', ForecastPeriod.MONTH)
    assert result.reason == ParseFailureReason.MISSING_TOTAL


def test_parse_amounts_beyond_float_range_are_rejected():
    categories = '"categoryForecasts": {"Food": "1e999999", "Rent": 10}'

    result = parse_forecast_response('{"totalForecast": 1e999999, ' + categories + "}", ForecastPeriod.MONTH)
    assert result.reason == ParseFailureReason.MISSING_TOTAL

    result = parse_forecast_response('{"totalForecast": 10, ' + categories + "}", ForecastPeriod.MONTH)
    assert result.category_forecasts == {"Rent": Decimal("10")}


def test_parse_defaults_for_partial_response():
    """Scenario D: unknown trend spelling, no confidence or lists"""
    result = parse_forecast_response('{"totalForecast": 120, "trend": "up"}', ForecastPeriod.MONTH)

    assert isinstance(result, Forecast)
    assert result.total_forecast == Decimal("120")
    assert result.trend in (Trend.INCREASING, Trend.STABLE)
    assert result.confidence == 70
    assert result.recommendations == []
    assert result.insights == []
    assert result.category_forecasts == {}
    assert result.source == ForecastSource.AI


def test_parse_trend_normalization():
    def trend_of(value):
        return parse_forecast_response(json.dumps({"totalForecast": 1, "trend": value}), ForecastPeriod.MONTH).trend

    assert trend_of("Increasing") == Trend.INCREASING
    assert trend_of("up") == Trend.INCREASING
    assert trend_of("DOWN") == Trend.DECREASING
    assert trend_of("stable") == Trend.STABLE
    assert trend_of("sideways") == Trend.STABLE
    assert trend_of(3) == Trend.STABLE


@pytest.mark.parametrize(
    "raw,expected",
    [
        (-50, 0),
        (0, 0),
        (42, 42),
        (99.6, 100),
        (100, 100),
        (250, 100),
        (-0.1, 0),
        ("65", 65),
        ("high", 70),
    ],
)
def test_parse_confidence_always_in_range(raw, expected):
    result = parse_forecast_response(json.dumps({"totalForecast": 1, "confidence": raw}), ForecastPeriod.MONTH)

    assert result.confidence == expected
    assert 0 <= result.confidence <= 100


def test_parse_negative_total_clamped_to_zero():
    result = parse_forecast_response('{"totalForecast": -20}', ForecastPeriod.YEAR)
    assert result.total_forecast == 0


def test_parse_ignores_source_from_oracle():
    result = parse_forecast_response('{"totalForecast": 5, "source": "FALLBACK"}', ForecastPeriod.MONTH)
    assert result.source == ForecastSource.AI


def test_parse_repairs_malformed_optional_fields():
    payload = {
        "totalForecast": 10,
        "categoryForecasts": {"Food": 7, "Bad": "n/a", "Refund": -3},
        "recommendations": ["ok", 5, None],
        "insights": "not a list",
    }
    result = parse_forecast_response(json.dumps(payload), ForecastPeriod.MONTH)

    assert result.category_forecasts == {"Food": Decimal("7"), "Refund": Decimal("0")}
    assert result.recommendations == ["ok"]
    assert result.insights == []
