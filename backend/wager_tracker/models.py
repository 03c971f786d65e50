"""Domain models used by the wager tracking core."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class NormalizationKind(str, Enum):
    """Compounding convention used to turn a raw series into values."""

    PRICE_RATIO = "price_ratio"
    DAILY_RATE = "daily_rate"
    MONTHLY_RATE = "monthly_rate"
    LINEAR_SPREAD_FX = "linear_spread_fx"


@dataclass(frozen=True)
class PricePoint:
    """One observation of a price, a rate or a portfolio value."""

    date: str
    value: float

    @property
    def month(self) -> str:
        """Return the ``YYYY-MM`` key of the observation."""

        return self.date[:7]


@dataclass(frozen=True)
class ChartDataPoint:
    """One row of the merged timeline.

    ``values`` only holds the instruments that already had an observation on
    or before ``date``.
    """

    date: str
    values: Dict[str, float] = field(default_factory=dict)

    def get(self, key: str) -> Optional[float]:
        return self.values.get(key)

    def to_dict(self) -> Dict[str, object]:
        row: Dict[str, object] = {"date": self.date}
        row.update(self.values)
        return row


@dataclass(frozen=True)
class PeriodReturns:
    """Calendar relative returns in percent."""

    current_month: float
    year_to_date: float
    last_3_months: float
    last_6_months: float
    last_12_months: float
    last_24_months: float
    since_inception: float

    @classmethod
    def zero(cls) -> "PeriodReturns":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ConsistencyStats:
    """Monthly consistency metrics derived from discrete monthly returns."""

    positive_months: int
    negative_months: int
    best_month: float
    worst_month: float

    @classmethod
    def zero(cls) -> "ConsistencyStats":
        return cls(0, 0, 0.0, 0.0)


@dataclass(frozen=True)
class AssetStatistics:
    returns: PeriodReturns
    consistency: ConsistencyStats


@dataclass(frozen=True)
class AssetTableData:
    """Presentation ready statistics row for one instrument."""

    name: str
    color: str
    returns: PeriodReturns
    consistency: ConsistencyStats


@dataclass(frozen=True)
class InstrumentResult:
    value_series: List[PricePoint]
    current_value: float
    return_since_inception: float


@dataclass(frozen=True)
class Dashboard:
    """Everything the presentation layer needs for one request."""

    per_instrument: Dict[str, InstrumentResult]
    merged_timeline: List[ChartDataPoint]
    table_rows: List[AssetTableData]


def sort_series(series) -> List[PricePoint]:
    """Return a new list ordered by date string (ISO dates sort correctly)."""

    return sorted(series, key=lambda point: point.date)


def series_to_map(series) -> Dict[str, float]:
    """Map date to value; the last occurrence of a duplicated date wins."""

    return {point.date: point.value for point in series}
