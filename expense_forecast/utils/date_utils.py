"""Date manipulation utilities"""

from calendar import monthrange
from datetime import date, timedelta
from typing import List, Tuple


def subtract_months(from_date: date, months: int) -> date:
    """Step back whole calendar months, clamping to the last day of the target month"""
    month_index = from_date.year * 12 + (from_date.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = monthrange(year, month)[1]
    return date(year, month, min(from_date.day, last_day))


def rolling_windows(today: date, days: int, count: int = 4) -> List[Tuple[date, date]]:
    """
    Contiguous (start, end_exclusive) windows counted backward from the end of today.

    The first window ends at today + 1 day so transactions dated today are
    included; each following window ends where the previous one starts.
    """
    anchor = today + timedelta(days=1)
    windows = []
    for i in range(count):
        end = anchor - timedelta(days=i * days)
        windows.append((end - timedelta(days=days), end))
    return windows
