# squadboard/client/records.py
"""Typed records for payloads coming back from the task API.

Decoding is deliberately forgiving: the list has to render even when the server
speaks a slightly newer or older vocabulary than this client.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from squadboard.presentation.deadline import parse_datetime
from squadboard.vocabulary import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    DEFAULT_TYPE,
    TASK_PRIORITIES,
    TASK_STATUSES,
    TASK_TYPES,
)

logger = logging.getLogger("squadboard.client")

DRAFT_ID_PREFIX = "draft_"

# wire name -> field name for everything a task carries
TASK_FIELD_NAMES = {
    "id": "id",
    "name": "name",
    "description": "description",
    "type": "type",
    "status": "status",
    "priority": "priority",
    "deadline": "deadline",
    "assigneeId": "assignee_id",
    "creatorId": "creator_id",
    "relatedAthleteIds": "related_athlete_ids",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def is_draft_id(task_id: Optional[str]) -> bool:
    return isinstance(task_id, str) and task_id.startswith(DRAFT_ID_PREFIX)


def field_name(name: str) -> str:
    """Accept ``assigneeId`` as well as ``assignee_id``."""
    if name in TASK_FIELD_NAMES.values():
        return name
    if name in TASK_FIELD_NAMES:
        return TASK_FIELD_NAMES[name]
    raise ValueError(f"Unknown task field: {name}")


def _enum_value(value, allowed, default, what):
    if not isinstance(value, str) or not value.strip():
        return default
    value = value.strip().lower()
    if value not in allowed:
        logger.warning("task_unknown_value", extra={"field": what, "value": value})
    return value


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskRecord(Record):
    id: str
    name: str = ""
    description: Optional[str] = None
    type: str = DEFAULT_TYPE
    status: str = DEFAULT_STATUS
    priority: str = DEFAULT_PRIORITY
    deadline: Optional[datetime] = None
    assignee_id: Optional[str] = None
    creator_id: Optional[str] = None
    related_athlete_ids: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("name", mode="before")
    def name_text(cls, value):
        return value if isinstance(value, str) else ""

    @field_validator("status", mode="before")
    def tolerant_status(cls, value):
        return _enum_value(value, TASK_STATUSES, DEFAULT_STATUS, "status")

    @field_validator("priority", mode="before")
    def tolerant_priority(cls, value):
        return _enum_value(value, TASK_PRIORITIES, DEFAULT_PRIORITY, "priority")

    @field_validator("type", mode="before")
    def tolerant_type(cls, value):
        return _enum_value(value, TASK_TYPES, DEFAULT_TYPE, "type")

    @field_validator("deadline", "created_at", "updated_at", mode="before")
    def tolerant_datetime(cls, value):
        return parse_datetime(value)

    @field_validator("assignee_id", "creator_id", mode="before")
    def empty_id_is_unset(cls, value):
        return value or None

    @field_validator("related_athlete_ids", mode="before")
    def athlete_list(cls, value):
        if not value:
            return []
        return [str(athlete_id) for athlete_id in value if athlete_id]

    @property
    def is_draft(self) -> bool:
        return is_draft_id(self.id)


class PersonRecord(Record):
    id: str
    name: str
    type: str = "athlete"
    sport: Optional[str] = None
    team: Optional[str] = None
    position: Optional[str] = None
