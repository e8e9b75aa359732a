"""Transaction aggregation - category totals and rolling period buckets"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from expense_forecast.domain.models import (
    Aggregate,
    CategoryShare,
    PeriodBucket,
    Transaction,
    TransactionKind,
)
from expense_forecast.utils.date_utils import rolling_windows

WEEKLY_BUCKET_DAYS = 7
MONTHLY_BUCKET_DAYS = 30
QUARTERLY_BUCKET_DAYS = 90
BUCKET_COUNT = 4
TOP_CATEGORY_LIMIT = 5

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def select_expenses(
    transactions: Optional[Iterable[Transaction]],
    since: date,
    until: date,
) -> List[Transaction]:
    """Keep expense transactions dated within [since, until]"""
    if not transactions:
        return []
    return [
        t for t in transactions
        if t.kind == TransactionKind.EXPENSE and since <= t.occurred_on <= until
    ]


def build_period_buckets(
    transactions: List[Transaction],
    bucket_days: int,
    today: date,
) -> List[PeriodBucket]:
    """
    Split spending into 4 contiguous windows of bucket_days, most recent first.

    A transaction belongs to a bucket when start_date <= occurred_on < end_date.
    """
    buckets = []
    for start, end in rolling_windows(today, bucket_days, BUCKET_COUNT):
        in_window = [t.amount for t in transactions if start <= t.occurred_on < end]
        total = sum(in_window, ZERO)
        count = len(in_window)
        buckets.append(
            PeriodBucket(
                start_date=start,
                end_date=end,
                total=total,
                count=count,
                average=total / count if count else ZERO,
            )
        )
    return buckets


def rank_categories(category_totals: Dict[str, Decimal], total_amount: Decimal) -> List[CategoryShare]:
    """Largest categories first; equal amounts keep first-seen order"""
    ranked = sorted(category_totals.items(), key=lambda item: item[1], reverse=True)
    # sorted(reverse=True) keeps ties in original order, which is first-seen for dicts
    return [
        CategoryShare(
            category=category,
            amount=amount,
            percentage_of_total=(amount / total_amount * HUNDRED) if total_amount else ZERO,
        )
        for category, amount in ranked[:TOP_CATEGORY_LIMIT]
    ]


def aggregate_transactions(transactions: List[Transaction], today: date) -> Aggregate:
    """
    Summarize an already-filtered expense history.

    Requirements:
    - Category totals are exact running sums keyed by the raw category string
    - Category totals always add up to total_amount
    - Weekly, monthly and quarterly views each have exactly 4 buckets
    - Empty input yields zeros everywhere, never a division error
    """
    category_totals: Dict[str, Decimal] = {}
    total_amount = ZERO

    for txn in transactions:
        total_amount += txn.amount
        category_totals[txn.category] = category_totals.get(txn.category, ZERO) + txn.amount

    transaction_count = len(transactions)
    average_transaction = total_amount / transaction_count if transaction_count else ZERO

    return Aggregate(
        total_amount=total_amount,
        transaction_count=transaction_count,
        average_transaction=average_transaction,
        category_totals=category_totals,
        top_categories=rank_categories(category_totals, total_amount),
        weekly_buckets=build_period_buckets(transactions, WEEKLY_BUCKET_DAYS, today),
        monthly_buckets=build_period_buckets(transactions, MONTHLY_BUCKET_DAYS, today),
        quarterly_buckets=build_period_buckets(transactions, QUARTERLY_BUCKET_DAYS, today),
    )
