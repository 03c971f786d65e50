"""Period returns and monthly consistency metrics for one value series.

All lookups use "as of" semantics: the value of a series at date ``D`` is
the value of its last observation dated on or before ``D``.  When the series
starts after ``D`` the first observation is used instead, so instruments
with a shorter history read as flat before they begin.
"""
from __future__ import annotations

from bisect import bisect_right
from datetime import date, timedelta
from typing import Dict, List, Sequence

import pandas as pd

from .models import (
    AssetStatistics,
    ConsistencyStats,
    PeriodReturns,
    PricePoint,
    series_to_map,
    sort_series,
)
from .normalize import monthly_spread


def calculate_return(initial: float, final: float) -> float:
    """Percentage change from ``initial`` to ``final``; 0 for a zero base."""

    if initial == 0:
        return 0.0
    return (final - initial) / initial * 100.0


def value_as_of(series: Sequence[PricePoint], target: str) -> float:
    """Value of the last point dated ``<= target`` in a date sorted series."""

    dates = [point.date for point in series]
    idx = bisect_right(dates, target)
    if idx == 0:
        return series[0].value
    return series[idx - 1].value


def _months_before(day: date, months: int) -> str:
    shifted = pd.Timestamp(day) - pd.DateOffset(months=months)
    return shifted.date().isoformat()


def reference_dates(latest: str) -> Dict[str, str]:
    """Reference date per period for a series whose last point is ``latest``."""

    latest_day = date.fromisoformat(latest)
    end_of_prev_month = latest_day.replace(day=1) - timedelta(days=1)
    end_of_prev_year = date(latest_day.year - 1, 12, 31)
    return {
        "current_month": end_of_prev_month.isoformat(),
        "year_to_date": end_of_prev_year.isoformat(),
        "last_3_months": _months_before(latest_day, 3),
        "last_6_months": _months_before(latest_day, 6),
        "last_12_months": _months_before(latest_day, 12),
        "last_24_months": _months_before(latest_day, 24),
    }


def compute_returns(series: Sequence[PricePoint]) -> PeriodReturns:
    """Calendar relative returns as of the latest observation of ``series``."""

    if not series:
        return PeriodReturns.zero()
    ordered = sort_series(series)
    latest = ordered[-1]
    refs = reference_dates(latest.date)

    returns = {
        period: calculate_return(value_as_of(ordered, ref), latest.value)
        for period, ref in refs.items()
    }
    returns["since_inception"] = calculate_return(ordered[0].value, latest.value)
    return PeriodReturns(**returns)


def monthly_returns(series: Sequence[PricePoint]) -> List[float]:
    """Discrete return of every calendar month covered by ``series``.

    The first month is measured from the first observation of the dataset,
    later months from the last observation of the previous month.
    """

    if not series:
        return []
    by_month: Dict[str, List[PricePoint]] = {}
    for point in sort_series(series):
        by_month.setdefault(point.month, []).append(point)

    results: List[float] = []
    previous_close = None
    for month_key in sorted(by_month):
        points = by_month[month_key]
        reference = points[0].value if previous_close is None else previous_close
        if reference > 0:
            results.append(calculate_return(reference, points[-1].value))
        previous_close = points[-1].value
    return results


def consistency_from_returns(returns: Sequence[float]) -> ConsistencyStats:
    if not returns:
        return ConsistencyStats.zero()
    return ConsistencyStats(
        positive_months=sum(1 for r in returns if r > 0),
        negative_months=sum(1 for r in returns if r < 0),
        best_month=max(returns),
        worst_month=min(returns),
    )


def compute_consistency(series: Sequence[PricePoint]) -> ConsistencyStats:
    """Positive/negative month counts and the best and worst month."""

    return consistency_from_returns(monthly_returns(series))


def calculate_asset_statistics(series: Sequence[PricePoint]) -> AssetStatistics:
    return AssetStatistics(returns=compute_returns(series), consistency=compute_consistency(series))


def calculate_indicator_statistics(
    monthly_rates: Sequence[PricePoint],
    value_series: Sequence[PricePoint],
    annual_spread: float = 0.0,
) -> AssetStatistics:
    """Statistics for an indicator published as one percentage per month.

    Period returns come from the re-sampled ``value_series``; consistency is
    read straight from the published rates, each one being a month's return
    (plus the monthly equivalent of ``annual_spread``).  A month published
    more than once counts once, with its latest rate.
    """

    spread_pct = monthly_spread(annual_spread) * 100.0
    by_date = series_to_map(monthly_rates)
    by_month: Dict[str, float] = {}
    for day in sorted(by_date):
        by_month[day[:7]] = by_date[day]
    rates = [by_month[month] + spread_pct for month in sorted(by_month)]
    return AssetStatistics(
        returns=compute_returns(value_series),
        consistency=consistency_from_returns(rates),
    )


__all__ = [
    "calculate_asset_statistics",
    "calculate_indicator_statistics",
    "calculate_return",
    "compute_consistency",
    "compute_returns",
    "consistency_from_returns",
    "monthly_returns",
    "reference_dates",
    "value_as_of",
]
