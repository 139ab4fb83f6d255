"""
Search and date-window filters shared by the project and task listings.

Weeks start on Monday.
"""
from enum import Enum
from datetime import date, timedelta
from typing import Optional
from dateutil.relativedelta import relativedelta, MO


class DueFilter(str, Enum):
    NO_DEADLINE = "noDeadline"
    OVERDUE = "overdue"
    PAST_DUE = "pastDue"
    DUE_TODAY = "dueToday"
    DUE_THIS_WEEK = "dueThisWeek"
    DUE_NEXT_WEEK = "dueNextWeek"


class ProgressStage(str, Enum):
    NOT_STARTED = "notStarted"
    EARLY_STAGE = "earlyStage"
    MID_STAGE = "midStage"
    LATE_STAGE = "lateStage"
    COMPLETED = "completed"


class ProjectSort(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    UPDATED_ASC = "updatedAt-asc"
    UPDATED_DESC = "updatedAt-desc"


class CompletedWindow(str, Enum):
    TODAY = "today"
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"


def matches_search(term: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match against any of ``fields``."""
    if not term:
        return True
    needle = term.strip().lower()
    if not needle:
        return True
    return any(field and needle in field.lower() for field in fields)


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    start = day + relativedelta(weekday=MO(-1))
    return start, start + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    start = date(year, month, 1)
    return start, start + relativedelta(months=1) - timedelta(days=1)


def matches_due_filter(
    due: Optional[date],
    due_filter: Optional[DueFilter],
    today: date,
    completed: bool = False,
) -> bool:
    """
    Apply a deadline filter.

    ``overdue`` and ``pastDue`` are the same window (before today) and skip
    completed items.
    """
    if due_filter is None:
        return True
    if due is None:
        return due_filter == DueFilter.NO_DEADLINE
    if due_filter == DueFilter.NO_DEADLINE:
        return False
    if due_filter in (DueFilter.OVERDUE, DueFilter.PAST_DUE):
        return due < today and not completed
    if due_filter == DueFilter.DUE_TODAY:
        return due == today

    this_week_start, this_week_end = week_bounds(today)
    if due_filter == DueFilter.DUE_THIS_WEEK:
        return this_week_start <= due <= this_week_end
    if due_filter == DueFilter.DUE_NEXT_WEEK:
        next_week_start = this_week_start + timedelta(days=7)
        return next_week_start <= due <= next_week_start + timedelta(days=6)
    return True


def progress_stage(progress: int) -> ProgressStage:
    if progress <= 0:
        return ProgressStage.NOT_STARTED
    if progress <= 25:
        return ProgressStage.EARLY_STAGE
    if progress <= 75:
        return ProgressStage.MID_STAGE
    if progress < 100:
        return ProgressStage.LATE_STAGE
    return ProgressStage.COMPLETED


def completed_window_start(window: CompletedWindow, today: date) -> date:
    """First day (inclusive) of a "completed in the last N days" window."""
    if window == CompletedWindow.LAST_7_DAYS:
        return today - timedelta(days=6)
    if window == CompletedWindow.LAST_30_DAYS:
        return today - timedelta(days=29)
    return today
