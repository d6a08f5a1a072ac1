"""Task service"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from taskboard.schemas.task import TaskResponse
from taskboard.storage.base import Storage

CLOSED_STATUSES = ("completed", "cancelled")
UPCOMING_DAYS = 7


def start_of_day(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now()
    return datetime.combine(now.date(), datetime.min.time())


def today_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """[aujourd'hui 00:00, demain 00:00)"""
    day_start = start_of_day(now)
    return day_start, day_start + timedelta(days=1)


def upcoming_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """(demain 00:00, aujourd'hui 00:00 + 8 jours]"""
    day_start = start_of_day(now)
    return day_start + timedelta(days=1), day_start + timedelta(days=UPCOMING_DAYS + 1)


def get_today_tasks(storage: Storage, now: Optional[datetime] = None) -> List[TaskResponse]:
    day_start, day_end = today_window(now)
    return storage.get_tasks_between(day_start, day_end, include_start=True, include_end=False)


def get_upcoming_tasks(storage: Storage, now: Optional[datetime] = None) -> List[TaskResponse]:
    # jamais de recouvrement avec get_today_tasks
    after, until = upcoming_window(now)
    return storage.get_tasks_between(after, until, include_start=False, include_end=True)


def get_overdue_tasks(storage: Storage, now: Optional[datetime] = None) -> List[TaskResponse]:
    today_start = start_of_day(now)

    return [
        task for task in storage.get_tasks()
        if task.end_date is not None
        and task.end_date < today_start
        and task.status not in CLOSED_STATUSES
    ]
