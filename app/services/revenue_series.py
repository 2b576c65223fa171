"""
Monthly Revenue Series

Net revenue of completed estimates bucketed by calendar month over a
trailing window that ends at the current month.
"""

from typing import Iterable, List, Optional, Tuple
from dataclasses import dataclass
from datetime import date

from app.models.garage import Estimate, utc_today
from app.services.financials import calculate_estimate_financials


DEFAULT_WINDOW_MONTHS = 12


@dataclass(frozen=True)
class MonthlyRevenue:
    """Revenue bucket for one calendar month"""
    year: int
    month: int
    net_revenue: float


def trailing_months(as_of: date, window_length: int = DEFAULT_WINDOW_MONTHS) -> List[Tuple[int, int]]:
    """(year, month) keys for the trailing window, oldest first."""
    current = as_of.year * 12 + (as_of.month - 1)
    keys = []
    for index in range(current - window_length + 1, current + 1):
        year, month_index = divmod(index, 12)
        keys.append((year, month_index + 1))
    return keys


def monthly_revenue(
    estimates: Iterable[Estimate],
    window_length: int = DEFAULT_WINDOW_MONTHS,
    as_of: Optional[date] = None
) -> List[MonthlyRevenue]:
    """
    Net revenue per month for the last `window_length` months.

    Every month in the window is present, zero when nothing was completed.
    """
    as_of = as_of or utc_today()
    buckets = {key: 0.0 for key in trailing_months(as_of, window_length)}

    for e in estimates:
        if not e.is_completed:
            continue
        key = (e.date.year, e.date.month)
        if key in buckets:
            buckets[key] += calculate_estimate_financials(e).total_revenue

    return [
        MonthlyRevenue(year=year, month=month, net_revenue=value)
        for (year, month), value in buckets.items()
    ]
