"""Dashboard assembly: retrieve every raw series, then run the core."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Mapping, Sequence

from app.config import AppSettings, get_settings
from app.providers.market_data import MarketDataProvider, fetch_all
from app.schemas import (
    AssetDataSchema,
    AssetTableDataSchema,
    BenchmarksSchema,
    DashboardResponse,
    PricePointSchema,
)
from wager_tracker import Dashboard, PricePoint, WagerAggregator, WagerConfig

logger = logging.getLogger(__name__)


def _points(series: Sequence[PricePoint]) -> list[PricePointSchema]:
    return [PricePointSchema(date=p.date, value=p.value) for p in series]


def _asset(dashboard: Dashboard, config: WagerConfig, key: str) -> AssetDataSchema:
    spec = config.instrument(key)
    result = dashboard.per_instrument[key]
    return AssetDataSchema(
        name=spec.name,
        color=spec.color,
        data=_points(result.value_series),
        initial_value=config.initial_investment,
        current_value=result.current_value,
        return_percent=result.return_since_inception,
    )


def to_response(
    dashboard: Dashboard,
    config: WagerConfig,
    *,
    last_update: datetime | None = None,
) -> DashboardResponse:
    """Shape a core :class:`Dashboard` into the frontend payload."""

    benchmark_keys = [spec.key for spec in config.instruments if spec.key not in config.primary]
    benchmarks = BenchmarksSchema(
        **{key: _points(dashboard.per_instrument[key].value_series) for key in benchmark_keys}
    )
    return DashboardResponse(
        bitcoin=_asset(dashboard, config, "bitcoin"),
        ibovespa=_asset(dashboard, config, "ibovespa"),
        benchmarks=benchmarks,
        chart_data=[row.to_dict() for row in dashboard.merged_timeline],
        table_data=[
            AssetTableDataSchema(
                name=row.name,
                color=row.color,
                returns=asdict(row.returns),
                consistency=asdict(row.consistency),
            )
            for row in dashboard.table_rows
        ],
        last_update=last_update or datetime.now(timezone.utc),
    )


def compute_from_raw(
    raw_series: Mapping[str, Sequence[PricePoint]],
    settings: AppSettings | None = None,
) -> DashboardResponse:
    settings = settings or get_settings()
    config = settings.to_wager_config()
    dashboard = WagerAggregator(config).compute_dashboard(raw_series)
    return to_response(dashboard, config)


async def build_dashboard(
    provider: MarketDataProvider,
    settings: AppSettings | None = None,
) -> DashboardResponse:
    """Fetch all raw series concurrently and compute the dashboard.

    :class:`~app.providers.market_data.RetrievalError` propagates unchanged.
    """

    settings = settings or get_settings()
    config = settings.to_wager_config()
    raw_series = await fetch_all(provider, config.source_ids)
    logger.info(
        "Retrieved %d raw series (%d points)",
        len(raw_series),
        sum(len(points) for points in raw_series.values()),
    )
    return compute_from_raw(raw_series, settings)


__all__ = ["build_dashboard", "compute_from_raw", "to_response"]
