"""Merge of several value series onto one forward-filled daily timeline."""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Sequence

import pandas as pd

from .models import ChartDataPoint, PricePoint


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def _to_series(key: str, points: Sequence[PricePoint]) -> pd.Series:
    s = pd.Series(
        [float(p.value) for p in points],
        index=[p.date for p in points],
        dtype=float,
        name=key,
    )
    s = s[~s.index.duplicated(keep="last")]
    return s.sort_index()


def merge(series_by_key: Mapping[str, Sequence[PricePoint]]) -> List[ChartDataPoint]:
    """Align every series on the union of their dates.

    Each column carries its last known value across dates it has no
    observation for and is left out of rows dated before its first
    observation.  Values are rounded to whole currency units.
    """

    columns: Dict[str, pd.Series] = {
        key: _to_series(key, points) for key, points in series_by_key.items()
    }
    dates = sorted({d for s in columns.values() for d in s.index})
    if not dates:
        return []

    frame = pd.DataFrame(index=pd.Index(dates, name="date"))
    for key, s in columns.items():
        frame[key] = s.reindex(frame.index)
    frame = frame.ffill()

    rows: List[ChartDataPoint] = []
    for day, record in zip(frame.index, frame.to_dict(orient="records")):
        values = {
            key: _round_half_up(value)
            for key, value in record.items()
            if not pd.isna(value)
        }
        rows.append(ChartDataPoint(date=str(day), values=values))
    return rows


__all__ = ["merge"]
