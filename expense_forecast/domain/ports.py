"""Collaborator interfaces the forecasting domain depends on"""

from datetime import date
from typing import List, Optional, Protocol

from expense_forecast.domain.models import Transaction


class TransactionSource(Protocol):
    async def fetch(self, since: date) -> Optional[List[Transaction]]:
        ...


class ForecastOracle(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


class KeyValueStore(Protocol):
    """Durable string store backing the forecast cache"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete_prefix(self, prefix: str) -> int:
        ...
