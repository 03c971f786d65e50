"""Pydantic schema exports."""

from .dashboard import (
    AssetDataSchema,
    AssetTableDataSchema,
    BenchmarksSchema,
    ConsistencyStatsSchema,
    DashboardResponse,
    ErrorResponse,
    PeriodReturnsSchema,
    PricePointSchema,
)

__all__ = [
    "AssetDataSchema",
    "AssetTableDataSchema",
    "BenchmarksSchema",
    "ConsistencyStatsSchema",
    "DashboardResponse",
    "ErrorResponse",
    "PeriodReturnsSchema",
    "PricePointSchema",
]
