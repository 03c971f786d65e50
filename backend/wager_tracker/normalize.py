"""Conversion of raw price and rate series into portfolio value series."""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from .models import NormalizationKind, PricePoint, series_to_map


def monthly_spread(annual_spread: float) -> float:
    """Return the monthly compounding increment equivalent to ``annual_spread``."""

    if not annual_spread:
        return 0.0
    return (1.0 + annual_spread) ** (1.0 / 12.0) - 1.0


def days_between(start: str, end: str) -> int:
    """Whole calendar days from ``start`` to ``end`` (ISO date strings)."""

    return (date.fromisoformat(end) - date.fromisoformat(start)).days


def shared_date_axis(*series: Iterable[PricePoint]) -> List[str]:
    """Sorted union of the dates found in ``series``."""

    dates = set()
    for points in series:
        dates.update(point.date for point in points)
    return sorted(dates)


def prices_to_portfolio_values(
    prices: Sequence[PricePoint], initial_investment: float
) -> List[PricePoint]:
    """Scale a price series so that its first point equals ``initial_investment``.

    A zero first price has no meaningful ratio: every point then holds
    ``initial_investment``.
    """

    if not prices:
        return []
    initial_price = prices[0].value
    result: List[PricePoint] = []
    for i, point in enumerate(prices):
        if i == 0 or initial_price == 0:
            value = float(initial_investment)
        else:
            value = initial_investment * (point.value / initial_price)
        result.append(PricePoint(date=point.date, value=value))
    return result


def accumulate_daily_rate(
    rates: Sequence[PricePoint], initial_investment: float
) -> List[PricePoint]:
    """Compound a per-day percentage rate (e.g. CDI) over every observation."""

    accumulated = float(initial_investment)
    result: List[PricePoint] = []
    for point in rates:
        accumulated *= 1.0 + point.value / 100.0
        result.append(PricePoint(date=point.date, value=accumulated))
    return result


def accumulate_monthly_rate(
    rates: Sequence[PricePoint],
    all_dates: Sequence[str],
    initial_investment: float,
    annual_spread: float = 0.0,
) -> List[PricePoint]:
    """Re-sample a monthly percentage rate onto ``all_dates``.

    The accumulator is compounded once, on the first date of each month that
    has a published rate, and carried unchanged for the rest of that month.
    Months without a rate keep the previous value.
    """

    spread = monthly_spread(annual_spread)
    rate_by_month: Dict[str, float] = {}
    for point in rates:
        rate_by_month[point.month] = point.value

    accumulated = float(initial_investment)
    last_month = ""
    result: List[PricePoint] = []
    for day in all_dates:
        month_key = day[:7]
        if month_key != last_month and month_key in rate_by_month:
            accumulated *= 1.0 + rate_by_month[month_key] / 100.0 + spread
            last_month = month_key
        result.append(PricePoint(date=day, value=accumulated))
    return result


def accumulate_fx_with_spread(
    fx_rates: Sequence[PricePoint],
    initial_investment: float,
    annual_spread: float,
    start_date: str,
) -> List[PricePoint]:
    """FX variation plus a linearly accrued annual spread counted from ``start_date``.

    With a zero first rate the variation stays at 1 and only the spread accrues.
    """

    if not fx_rates:
        return []
    initial_rate = fx_rates[0].value
    result: List[PricePoint] = []
    for point in fx_rates:
        variation = point.value / initial_rate if initial_rate != 0 else 1.0
        accrued = 1.0 + annual_spread * (days_between(start_date, point.date) / 365.0)
        result.append(PricePoint(date=point.date, value=initial_investment * variation * accrued))
    return result


def normalize(
    kind: NormalizationKind,
    raw_series: Sequence[PricePoint],
    all_dates: Optional[Sequence[str]] = None,
    initial_investment: float = 100_000.0,
    *,
    annual_spread: float = 0.0,
    start_date: Optional[str] = None,
) -> List[PricePoint]:
    """Dispatch ``raw_series`` to the compounding rule of ``kind``.

    Input is sorted by date first; duplicated dates keep their last value.
    """

    ordered = _dedupe_sorted(raw_series)
    kind = NormalizationKind(kind)
    if kind is NormalizationKind.PRICE_RATIO:
        return prices_to_portfolio_values(ordered, initial_investment)
    if kind is NormalizationKind.DAILY_RATE:
        return accumulate_daily_rate(ordered, initial_investment)
    if kind is NormalizationKind.MONTHLY_RATE:
        axis = list(all_dates) if all_dates is not None else [p.date for p in ordered]
        return accumulate_monthly_rate(ordered, axis, initial_investment, annual_spread)
    if kind is NormalizationKind.LINEAR_SPREAD_FX:
        reference = start_date or (ordered[0].date if ordered else "")
        return accumulate_fx_with_spread(ordered, initial_investment, annual_spread, reference)
    raise ValueError(f"Unsupported normalization kind: {kind}")


def _dedupe_sorted(series: Sequence[PricePoint]) -> List[PricePoint]:
    by_date = series_to_map(series)
    return [PricePoint(date=d, value=by_date[d]) for d in sorted(by_date)]


__all__ = [
    "accumulate_daily_rate",
    "accumulate_fx_with_spread",
    "accumulate_monthly_rate",
    "days_between",
    "monthly_spread",
    "normalize",
    "prices_to_portfolio_values",
    "shared_date_axis",
]
