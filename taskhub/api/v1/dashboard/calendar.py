"""
Calendar endpoint.

Endpoints:
- GET /api/v1/dashboard/calendar?year=&month= - Tasks due in a month, by day
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.schemas.dashboard import CalendarResponse
from taskhub.services import dashboard as dashboard_service

router = APIRouter()


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Defaults to the current month."""
    today = date.today()
    return await dashboard_service.calendar_month(
        db, actor, year or today.year, month or today.month
    )
