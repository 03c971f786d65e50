"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wager_tracker.config import DEFAULT_INITIAL_INVESTMENT, DEFAULT_START_DATE, WagerConfig


class AppSettings(BaseSettings):
    """Configuration options for the wager dashboard service."""

    app_name: str = Field(default="Bitcoin vs Ibovespa")
    log_level: str = Field(default="INFO")

    initial_investment: float = Field(default=DEFAULT_INITIAL_INVESTMENT, gt=0)
    start_date: str = Field(
        default=DEFAULT_START_DATE,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Campaign start date (YYYY-MM-DD).",
    )

    binance_base_url: str = Field(default="https://api.binance.com/api/v3")
    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3")
    yahoo_chart_url: str = Field(default="https://query2.finance.yahoo.com/v8/finance/chart")
    bcb_base_url: str = Field(default="https://api.bcb.gov.br/dados/serie/bcdata.sgs")

    bcb_series_cdi: int = Field(default=12, description="CDI daily rate (% per day).")
    bcb_series_ipca: int = Field(default=433, description="IPCA monthly (% per month).")
    bcb_series_dolar: int = Field(default=1, description="USD/BRL PTAX selling rate.")
    bcb_series_poupanca: int = Field(default=25, description="Savings monthly yield (%).")

    yahoo_ibovespa_symbol: str = Field(default="^BVSP")
    yahoo_ifix_symbol: str = Field(default="IFIX.SA")
    yahoo_btc_usd_symbol: str = Field(default="BTC-USD")
    yahoo_usd_brl_symbol: str = Field(default="BRL=X")
    binance_symbol: str = Field(default="BTCBRL")

    fetch_retries: int = Field(default=3, ge=1)
    fetch_backoff_seconds: float = Field(default=1.0, ge=0.0)
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    revalidate_seconds: int = Field(default=3600, ge=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="wager-tracker")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def to_wager_config(self) -> WagerConfig:
        """Return the immutable core configuration for one computation."""

        return WagerConfig(initial_investment=self.initial_investment, start_date=self.start_date)

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"telemetry_otlp_endpoint"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "get_settings",
]
