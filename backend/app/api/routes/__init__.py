"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .dashboard import router as dashboard_router

api_router = APIRouter()
api_router.include_router(dashboard_router, prefix="/api", tags=["dashboard"])

__all__ = ["api_router"]
