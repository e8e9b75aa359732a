"""Transactions API HTTP client for fetching spending history"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from expense_forecast.config import settings
from expense_forecast.domain.exceptions import TransactionFetchError
from expense_forecast.domain.models import Transaction, TransactionKind

DEFAULT_CATEGORY = "Other"


def _parse_category(raw: Any) -> str:
    """Categories arrive either as a plain name or as an object with a name"""
    if isinstance(raw, str) and raw:
        return raw
    if isinstance(raw, dict) and raw.get("name"):
        return str(raw["name"])
    return DEFAULT_CATEGORY


def _parse_date(raw: str) -> date:
    if "T" in raw or " " in raw:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    return date.fromisoformat(raw)


def parse_transaction(txn: Dict[str, Any]) -> Transaction:
    try:
        amount = abs(Decimal(str(txn["amount"])))
    except InvalidOperation as e:
        raise ValueError(f"invalid amount {txn['amount']!r}") from e
    if not amount.is_finite():
        raise ValueError(f"non-finite amount {txn['amount']!r}")

    return Transaction(
        id=str(txn["id"]),
        amount=amount,
        kind=TransactionKind(str(txn["type"]).upper()),
        category=_parse_category(txn.get("category")),
        occurred_on=_parse_date(txn["date"]),
    )


class TransactionsClient:
    """Client for the finance backend transactions API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.transactions_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.token = token or settings.transactions_api_token
        self.transport = transport

    async def fetch(self, since: date) -> List[Transaction]:
        """
        Fetch transactions dated on or after `since`.

        Raises:
            TransactionFetchError: On timeout, HTTP errors, or invalid response
        """
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/api/transactions",
                    params={"since": since.isoformat()},
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()

                records = data.get("transactions", []) if isinstance(data, dict) else data
                return [parse_transaction(txn) for txn in records]

            except httpx.TimeoutException as e:
                raise TransactionFetchError(f"Transactions API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TransactionFetchError(f"Transactions API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransactionFetchError(f"Transactions API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise TransactionFetchError(f"Invalid transaction data: {e}") from e
