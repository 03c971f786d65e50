"""Immutable configuration for the wager computation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import NormalizationKind

DEFAULT_INITIAL_INVESTMENT = 100_000.0
DEFAULT_START_DATE = "2024-06-24"


@dataclass(frozen=True)
class InstrumentSpec:
    """Static mapping of one instrument to its normalization parameters."""

    key: str
    name: str
    color: str
    kind: NormalizationKind
    annual_spread: float = 0.0
    # Raw series id when it differs from ``key`` (IPCA + 5% reads IPCA).
    source: Optional[str] = None
    # Monthly indicators get their consistency from the published rates.
    indicator_stats: bool = False

    @property
    def source_id(self) -> str:
        return self.source or self.key


DEFAULT_INSTRUMENTS: Tuple[InstrumentSpec, ...] = (
    InstrumentSpec("bitcoin", "Bitcoin", "#FFFFFF", NormalizationKind.PRICE_RATIO),
    InstrumentSpec("ibovespa", "Ibovespa", "#3B82F6", NormalizationKind.PRICE_RATIO),
    InstrumentSpec("cdi", "CDI", "#D97706", NormalizationKind.DAILY_RATE),
    InstrumentSpec(
        "poupanca", "Poupança", "#7C3AED", NormalizationKind.MONTHLY_RATE, indicator_stats=True
    ),
    InstrumentSpec("ifix", "IFIX", "#0F766E", NormalizationKind.PRICE_RATIO),
    InstrumentSpec("ipca", "IPCA", "#C2410C", NormalizationKind.MONTHLY_RATE, indicator_stats=True),
    InstrumentSpec(
        "ipcaPlus5",
        "IPCA + 5%",
        "#DC2626",
        NormalizationKind.MONTHLY_RATE,
        annual_spread=0.05,
        source="ipca",
        indicator_stats=True,
    ),
    InstrumentSpec(
        "dolarPlus4",
        "Dólar + 4%",
        "#059669",
        NormalizationKind.LINEAR_SPREAD_FX,
        annual_spread=0.04,
        source="dolar",
    ),
)


@dataclass(frozen=True)
class WagerConfig:
    """Parameters shared by every instrument of one computation."""

    initial_investment: float = DEFAULT_INITIAL_INVESTMENT
    start_date: str = DEFAULT_START_DATE
    primary: Tuple[str, str] = ("bitcoin", "ibovespa")
    instruments: Tuple[InstrumentSpec, ...] = DEFAULT_INSTRUMENTS

    def instrument(self, key: str) -> InstrumentSpec:
        for spec in self.instruments:
            if spec.key == key:
                return spec
        raise KeyError(f"Unknown instrument {key!r}")

    @property
    def source_ids(self) -> Tuple[str, ...]:
        """Distinct raw series ids needed, in configuration order."""

        seen: list[str] = []
        for spec in self.instruments:
            if spec.source_id not in seen:
                seen.append(spec.source_id)
        return tuple(seen)


__all__ = [
    "DEFAULT_INITIAL_INVESTMENT",
    "DEFAULT_INSTRUMENTS",
    "DEFAULT_START_DATE",
    "InstrumentSpec",
    "WagerConfig",
]
