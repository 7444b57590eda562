# squadboard/presentation/formatters.py
"""Display labels and sort weights for the enum-like task fields.

Every function here is total: unknown or missing values land in the default
bucket instead of raising.
"""
from __future__ import annotations

import re
from typing import Any, NamedTuple

from squadboard.vocabulary import DEFAULT_PRIORITY, DEFAULT_STATUS

STATUS_LABELS = {
    "new": "New",
    "in_progress": "In Progress",
    "pending": "Pending",
    "blocked": "Blocked",
    "completed": "Completed",
}

# blocked and pending are two spellings of the same column
STATUS_BUCKETS = {
    "new": "new",
    "in_progress": "in_progress",
    "pending": "pending",
    "blocked": "pending",
    "completed": "completed",
}


class PriorityFormat(NamedTuple):
    label: str
    sort_weight: int


PRIORITY_FORMATS = {
    "high": PriorityFormat("High", 3),
    "medium": PriorityFormat("Medium", 2),
    "low": PriorityFormat("Low", 1),
}

TYPE_LABELS = {
    "generaltodo": "General Task",
    "assessmentreview": "Assessment Review",
}

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s._\-]+")


def normalize_key(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def status_bucket(status: Any) -> str:
    return STATUS_BUCKETS.get(normalize_key(status), STATUS_BUCKETS[DEFAULT_STATUS])


def format_status(status: Any) -> str:
    return STATUS_LABELS.get(normalize_key(status), STATUS_LABELS[DEFAULT_STATUS])


def format_priority(priority: Any) -> PriorityFormat:
    return PRIORITY_FORMATS.get(normalize_key(priority), PRIORITY_FORMATS[DEFAULT_PRIORITY])


def format_task_type(task_type: Any) -> str:
    """Human label for a task type key, e.g. ``injuryFollowUp`` -> ``Injury Follow Up``."""
    if not isinstance(task_type, str) or not task_type.strip():
        return ""

    key = task_type.strip()
    curated = TYPE_LABELS.get(key.lower())
    if curated:
        return curated

    words = _SEPARATORS.split(_CAMEL_BOUNDARY.sub(r"\1 \2", key))
    return " ".join(
        "Task" if word.lower() == "todo" else word[:1].upper() + word[1:]
        for word in words
        if word
    )
