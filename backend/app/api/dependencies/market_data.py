"""Market data provider dependency for API routes."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
from fastapi import Depends

from app.config import AppSettings, get_settings
from app.providers.market_data import MarketDataProvider


def get_app_settings() -> AppSettings:
    return get_settings()


async def get_market_data_provider(
    settings: AppSettings = Depends(get_app_settings),
) -> AsyncIterator[MarketDataProvider]:
    """Yield a provider bound to a request scoped httpx client."""

    timeout = httpx.Timeout(settings.http_timeout_seconds)
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        yield MarketDataProvider(client, settings)


__all__ = ["get_app_settings", "get_market_data_provider"]
