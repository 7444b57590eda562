# squadboard/presentation/deadline.py
"""Deadline badges.

Deadlines are compared at day granularity: both the deadline and "today" are
truncated to dates before the difference is taken, so time of day never moves a
task between buckets.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import NamedTuple, Optional, Union

BUCKET_OVERDUE = "overdue"
BUCKET_WARNING = "warning"
BUCKET_NORMAL = "normal"
BUCKET_NONE = "none"

NO_DEADLINE_LABEL = "–"

DateLike = Union[date, datetime, str, None]


class DeadlineBadge(NamedTuple):
    bucket: str
    label: str


def parse_datetime(value: DateLike) -> Optional[datetime]:
    """Best-effort conversion to a datetime; ``None`` for anything unusable."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def to_date(value: DateLike) -> Optional[date]:
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def epoch_millis(value: DateLike) -> int:
    """Sort projection of a deadline; missing or invalid dates count as 0."""
    parsed = parse_datetime(value)
    if parsed is None:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def classify_deadline(deadline: DateLike, today: DateLike = None) -> DeadlineBadge:
    day = to_date(deadline)
    if day is None:
        return DeadlineBadge(BUCKET_NONE, NO_DEADLINE_LABEL)

    reference = to_date(today) or date.today()
    diff_days = (day - reference).days

    if diff_days < 0:
        label = "Yesterday" if diff_days == -1 else f"{abs(diff_days)}d ago"
        return DeadlineBadge(BUCKET_OVERDUE, label)
    if diff_days == 0:
        # due today is already critical
        return DeadlineBadge(BUCKET_OVERDUE, "Today")
    if diff_days == 1:
        return DeadlineBadge(BUCKET_WARNING, "Tomorrow")
    if diff_days == 2:
        return DeadlineBadge(BUCKET_WARNING, "2d")
    if diff_days <= 7:
        return DeadlineBadge(BUCKET_NORMAL, f"{diff_days}d")
    return DeadlineBadge(BUCKET_NORMAL, f"{day:%b} {day.day}")
