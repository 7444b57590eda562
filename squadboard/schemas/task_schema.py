# squadboard/schemas/task_schema.py

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from squadboard.vocabulary import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    DEFAULT_TYPE,
    TASK_PRIORITIES,
    TASK_STATUSES,
    TASK_TYPES,
)


def _member(value: str, allowed: tuple, what: str) -> str:
    value = value.strip().lower()
    if value not in allowed:
        raise ValueError(f"{what} must be one of: {', '.join(allowed)}")
    return value


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# --------- Base schema (camelCase on the wire) ----------
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskBase(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    type: str = DEFAULT_TYPE
    status: str = DEFAULT_STATUS        # new / in_progress / pending / blocked / completed
    priority: str = DEFAULT_PRIORITY    # low / medium / high
    deadline: Optional[datetime] = None

    @field_validator("name")
    def name_not_blank(cls, value):
        if not value.strip():
            raise ValueError("Task name must not be empty")
        return value.strip()

    @field_validator("type")
    def known_type(cls, value):
        return _member(value, TASK_TYPES, "type")

    @field_validator("status")
    def known_status(cls, value):
        return _member(value, TASK_STATUSES, "status")

    @field_validator("priority")
    def known_priority(cls, value):
        return _member(value, TASK_PRIORITIES, "priority")

    @field_validator("deadline")
    def deadline_utc(cls, value):
        return _naive_utc(value)


# --------- CREATE ----------
class TaskCreate(TaskBase):
    # the store requires an assignee on insert
    assignee_id: str = Field(min_length=1)
    creator_id: Optional[str] = None
    related_athlete_ids: list[str] = Field(default_factory=list)


# --------- UPDATE (PUT / PATCH) ----------
class TaskUpdate(CamelModel):
    """Sparse update.

    A key missing from the body leaves the column alone; an explicit ``null``
    clears nullable columns. ``assigneeId: ""`` means unassigned.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    deadline: Optional[datetime] = None
    assignee_id: Optional[str] = None
    related_athlete_ids: Optional[list[str]] = None

    @field_validator("name", "type", "status", "priority", mode="before")
    def required_columns_not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return value

    @field_validator("name")
    def name_not_blank(cls, value):
        if not value.strip():
            raise ValueError("Task name must not be empty")
        return value.strip()

    @field_validator("type")
    def known_type(cls, value):
        return _member(value, TASK_TYPES, "type")

    @field_validator("status")
    def known_status(cls, value):
        return _member(value, TASK_STATUSES, "status")

    @field_validator("priority")
    def known_priority(cls, value):
        return _member(value, TASK_PRIORITIES, "priority")

    @field_validator("deadline")
    def deadline_utc(cls, value):
        return _naive_utc(value)

    @field_validator("assignee_id")
    def empty_assignee_is_unassigned(cls, value):
        return value or None

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


# --------- READ (responses) ----------
class TaskRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    type: str
    status: str
    priority: str
    deadline: Optional[datetime] = None
    assignee_id: Optional[str] = None
    creator_id: Optional[str] = None
    related_athlete_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
