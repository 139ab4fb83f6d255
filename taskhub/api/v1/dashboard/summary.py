"""
Dashboard summary endpoint.

Endpoints:
- GET /api/v1/dashboard/summary - Project and task aggregates for the caller
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.schemas.dashboard import DashboardSummaryResponse
from taskhub.services import dashboard as dashboard_service
from taskhub.services.filters import CompletedWindow

router = APIRouter()


@router.get("/summary", response_model=DashboardSummaryResponse)
async def get_summary(
    completedWindow: CompletedWindow = Query(
        CompletedWindow.TODAY,
        description="Window for the completed-task count"
    ),
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Aggregates over the caller's projects and tasks."""
    return await dashboard_service.dashboard_summary(db, actor, window=completedWindow)
