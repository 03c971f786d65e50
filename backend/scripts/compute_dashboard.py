"""Fetch market data and print the dashboard payload as JSON."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

import httpx

from app.config import get_settings
from app.core.logging import setup_logging
from app.providers.market_data import MarketDataProvider
from app.services.dashboard import build_dashboard


async def _run(output: Path | None) -> None:
    settings = get_settings()
    timeout = httpx.Timeout(settings.http_timeout_seconds)
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        payload = await build_dashboard(MarketDataProvider(client, settings), settings)
    body = payload.model_dump_json(by_alias=True, indent=2)
    if output is None:
        print(body)
    else:
        output.write_text(body, encoding="utf-8")
        print(f"Wrote {len(payload.chart_data)} chart rows to {output}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute the Bitcoin vs Ibovespa dashboard")
    parser.add_argument("--output", type=Path, default=None, help="Write JSON to this file")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    setup_logging(args.log_level)
    asyncio.run(_run(args.output))


if __name__ == "__main__":
    main()
