"""Orchestration of normalization, merge and statistics for every instrument."""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .config import InstrumentSpec, WagerConfig
from .models import (
    AssetStatistics,
    AssetTableData,
    Dashboard,
    InstrumentResult,
    NormalizationKind,
    PricePoint,
)
from .normalize import normalize, shared_date_axis
from .stats import calculate_asset_statistics, calculate_indicator_statistics, calculate_return
from .timeline import merge

logger = logging.getLogger(__name__)


def calculate_return_percent(initial_value: float, current_value: float) -> float:
    return calculate_return(initial_value, current_value)


class WagerAggregator:
    """Build the dashboard payload from raw series keyed by source id."""

    def __init__(self, config: WagerConfig | None = None) -> None:
        self.config = config or WagerConfig()

    def _normalize(
        self,
        spec: InstrumentSpec,
        raw: Sequence[PricePoint],
        axis: Sequence[str],
    ) -> List[PricePoint]:
        return normalize(
            spec.kind,
            raw,
            axis if spec.kind is NormalizationKind.MONTHLY_RATE else None,
            self.config.initial_investment,
            annual_spread=spec.annual_spread,
            start_date=self.config.start_date,
        )

    def _statistics(
        self,
        spec: InstrumentSpec,
        raw: Sequence[PricePoint],
        values: Sequence[PricePoint],
    ) -> AssetStatistics:
        if spec.indicator_stats:
            return calculate_indicator_statistics(raw, values, spec.annual_spread)
        return calculate_asset_statistics(values)

    def compute_dashboard(
        self, raw_series_by_instrument: Mapping[str, Sequence[PricePoint]]
    ) -> Dashboard:
        """Normalize, merge and summarise every configured instrument.

        Sources missing from ``raw_series_by_instrument`` are treated as
        empty series.
        """

        config = self.config
        raw_for = {
            spec.key: list(raw_series_by_instrument.get(spec.source_id, []))
            for spec in config.instruments
        }

        # Monthly indicators are re-sampled on the dates of the contestants.
        primary_values = {
            key: self._normalize(config.instrument(key), raw_for[key], [])
            for key in config.primary
        }
        axis = shared_date_axis(*primary_values.values())

        values_by_key: Dict[str, List[PricePoint]] = {}
        for spec in config.instruments:
            if spec.key in primary_values:
                values_by_key[spec.key] = primary_values[spec.key]
            else:
                values_by_key[spec.key] = self._normalize(spec, raw_for[spec.key], axis)

        per_instrument: Dict[str, InstrumentResult] = {}
        table_rows: List[AssetTableData] = []
        for spec in config.instruments:
            values = values_by_key[spec.key]
            current = values[-1].value if values else config.initial_investment
            per_instrument[spec.key] = InstrumentResult(
                value_series=values,
                current_value=current,
                return_since_inception=calculate_return_percent(config.initial_investment, current),
            )
            stats = self._statistics(spec, raw_for[spec.key], values)
            table_rows.append(
                AssetTableData(
                    name=spec.name,
                    color=spec.color,
                    returns=stats.returns,
                    consistency=stats.consistency,
                )
            )
            logger.debug(
                "Normalized %s: %d raw points -> %d values, current=%.2f",
                spec.key,
                len(raw_for[spec.key]),
                len(values),
                current,
            )

        timeline = merge(values_by_key)
        logger.info(
            "Computed dashboard for %d instruments over %d dates",
            len(per_instrument),
            len(timeline),
        )
        return Dashboard(per_instrument=per_instrument, merged_timeline=timeline, table_rows=table_rows)


def compute_dashboard(
    raw_series_by_instrument: Mapping[str, Sequence[PricePoint]],
    config: Optional[WagerConfig] = None,
) -> Dashboard:
    """Compute the dashboard with ``config`` (defaults when omitted)."""

    return WagerAggregator(config).compute_dashboard(raw_series_by_instrument)


__all__ = ["WagerAggregator", "calculate_return_percent", "compute_dashboard"]
