"""Core package for the Bitcoin vs. Ibovespa wager computations."""

from .aggregator import WagerAggregator, compute_dashboard
from .config import InstrumentSpec, WagerConfig
from .models import (
    AssetTableData,
    ChartDataPoint,
    ConsistencyStats,
    Dashboard,
    NormalizationKind,
    PeriodReturns,
    PricePoint,
)
from .normalize import normalize
from .stats import compute_consistency, compute_returns
from .timeline import merge

__all__ = [
    "AssetTableData",
    "ChartDataPoint",
    "ConsistencyStats",
    "Dashboard",
    "InstrumentSpec",
    "NormalizationKind",
    "PeriodReturns",
    "PricePoint",
    "WagerAggregator",
    "WagerConfig",
    "compute_consistency",
    "compute_dashboard",
    "compute_returns",
    "merge",
    "normalize",
]
