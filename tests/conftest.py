"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Generator, List, Optional
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from expense_forecast.api.main import create_app
from expense_forecast.api.dependencies import get_forecast_cache, get_forecast_service
from expense_forecast.domain.cache import ForecastCache
from expense_forecast.domain.exceptions import CacheUnavailableError
from expense_forecast.domain.models import Transaction, TransactionKind
from expense_forecast.infrastructure.database.models import Base
from expense_forecast.infrastructure.database.repositories import ForecastCacheRepository
from expense_forecast.infrastructure.database.session import get_db
from expense_forecast.services.forecasting import ForecastService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2024, 6, 15)

VALID_ORACLE_RESPONSE = """Here is the forecast you asked for:
{
  "totalForecast": 450.5,
  "categoryForecasts": {"Food": 300, "Transport": 150.5},
  "trend": "INCREASING",
  "confidence": 85,
  "recommendations": ["Cook at home more often"],
  "insights": ["Food spending grew over the last month"]
}"""


def make_transaction(
    txn_id: str,
    amount: str,
    category: str,
    occurred_on: date,
    kind: TransactionKind = TransactionKind.EXPENSE,
) -> Transaction:
    return Transaction(
        id=txn_id,
        amount=Decimal(amount),
        kind=kind,
        category=category,
        occurred_on=occurred_on,
    )


class FakeTransactionSource:
    """In-memory transactions API; raises `error` when set"""

    def __init__(self, transactions: Optional[List[Transaction]] = None, error: Optional[Exception] = None):
        self.transactions = transactions
        self.error = error
        self.calls: List[date] = []

    async def fetch(self, since: date) -> Optional[List[Transaction]]:
        self.calls.append(since)
        if self.error:
            raise self.error
        return self.transactions


class FakeOracle:
    """Returns a canned completion and counts prompts; raises `error` when set"""

    def __init__(self, response: str = VALID_ORACLE_RESPONSE, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response


class InMemoryStore:
    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self.data if k.startswith(prefix)]
        for k in keys:
            del self.data[k]
        return len(keys)


class BrokenStore:
    """Store whose backend is down"""

    def get(self, key: str) -> Optional[str]:
        raise CacheUnavailableError("store offline")

    def set(self, key: str, value: str) -> None:
        raise CacheUnavailableError("store offline")

    def delete_prefix(self, prefix: str) -> int:
        raise CacheUnavailableError("store offline")


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def sample_transactions(today: date) -> List[Transaction]:
    """Scenario A history: Food 50, Food 30, Transport 20 in the current month, plus noise"""
    return [
        make_transaction("1", "50", "Food", today),
        make_transaction("2", "30", "Food", today - timedelta(days=3)),
        make_transaction("3", "20", "Transport", today - timedelta(days=10)),
        make_transaction("4", "2500", "Salary", today - timedelta(days=5), TransactionKind.INCOME),
    ]


@pytest.fixture
def memory_cache() -> ForecastCache:
    return ForecastCache(InMemoryStore())


@pytest.fixture
def sql_cache(db: Session) -> ForecastCache:
    return ForecastCache(ForecastCacheRepository(db))


@pytest.fixture
def fake_source(sample_transactions: List[Transaction]) -> FakeTransactionSource:
    return FakeTransactionSource(sample_transactions)


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def client(db: Session, fake_source: FakeTransactionSource, fake_oracle: FakeOracle) -> TestClient:
    """Create FastAPI test client with test database and fake collaborators"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_forecast_service(cache: ForecastCache = Depends(get_forecast_cache)):
        return ForecastService(fake_source, fake_oracle, cache, clock=lambda: TODAY)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_forecast_service] = override_get_forecast_service
    return TestClient(app)
