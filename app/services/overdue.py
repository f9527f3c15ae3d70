from datetime import datetime, timedelta, timezone
from typing import Iterable

from app.models.content_progress import ProgressStatus


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite often returns naive datetimes; treat as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def effective_due(item) -> datetime | None:
    """Due date pushed back by the grace period, or None if there is nothing due."""
    if not item.is_assignment or item.due_date is None:
        return None
    grace = item.grace_period_minutes or 0
    return as_utc(item.due_date) + timedelta(minutes=grace)


def is_overdue(item, now: datetime) -> bool:
    due = effective_due(item)
    if due is None:
        return False
    return as_utc(now) > due


def overdue_contributions(
    item,
    cohort: Iterable[int],
    index,
    now: datetime,
) -> int:
    """Number of cohort students for whom `item` is overdue and not completed.

    A student with no progress row at all still counts.
    """
    if not is_overdue(item, now):
        return 0
    return sum(
        1
        for student_id in cohort
        if index.status(student_id, item.id) != ProgressStatus.COMPLETED
    )
