"""
Dashboard API routers.
"""
from fastapi import APIRouter

from taskhub.api.v1.dashboard.summary import router as summary_router
from taskhub.api.v1.dashboard.calendar import router as calendar_router

dashboard_router = APIRouter(tags=["dashboard"])

dashboard_router.include_router(summary_router, prefix="/dashboard")
dashboard_router.include_router(calendar_router, prefix="/dashboard")

__all__ = ["dashboard_router"]
