"""Dashboard data endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from app.api.dependencies.market_data import get_app_settings, get_market_data_provider
from app.config import AppSettings
from app.providers.market_data import MarketDataProvider, RetrievalError
from app.schemas import DashboardResponse, ErrorResponse
from app.services.dashboard import build_dashboard

logger = logging.getLogger(__name__)

router = APIRouter()


def cache_control(settings: AppSettings) -> str:
    return f"public, s-maxage={settings.revalidate_seconds}, stale-while-revalidate"


@router.get(
    "/data",
    response_model=DashboardResponse,
    response_model_by_alias=True,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
async def get_dashboard_data(
    response: Response,
    provider: MarketDataProvider = Depends(get_market_data_provider),
    settings: AppSettings = Depends(get_app_settings),
) -> DashboardResponse | JSONResponse:
    try:
        payload = await build_dashboard(provider, settings)
    except RetrievalError as exc:
        logger.error("Error fetching market data: %s", exc)
        error = ErrorResponse(error="Failed to fetch market data", details=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.model_dump(),
        )
    response.headers["Cache-Control"] = cache_control(settings)
    return payload


__all__ = ["router"]
