# squadboard/presentation/view_engine.py
"""Sort/filter engine for the task list.

``derive_view`` turns the cached task collection plus a ``ViewSpec`` into the
ordered rows the list renders. Ordering is either field based (``Sorted``) or a
user supplied ``manual_order`` (``ManuallyOrdered``); the ordering state machine
functions are the only way to move between the two. ``kanban_columns`` groups
the same tasks into the status columns of the board view.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, NamedTuple, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from squadboard.presentation.deadline import epoch_millis, parse_datetime
from squadboard.presentation.formatters import format_priority, normalize_key, status_bucket
from squadboard.vocabulary import TASK_STATUSES

SORT_FIELDS = ("deadline", "name", "type", "status", "priority")
SORT_DIRECTIONS = ("asc", "desc")
DEFAULT_SORT_FIELD = "deadline"
DEFAULT_SORT_DIRECTION = "asc"

SORTED = "sorted"
MANUALLY_ORDERED = "manually_ordered"

_TRUE_STRINGS = ("true", "1", "yes", "on")


def _as_keys(values: Any) -> list[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return [value.strip().lower() if isinstance(value, str) else "" for value in values if value is not None]


def _as_ids(values: Any) -> list[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return ["" if value is None else str(value) for value in values]


class ViewFilters(BaseModel):
    """Inclusion lists per dimension; an empty list switches the dimension off."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: list[str] = Field(default_factory=list)
    priority: list[str] = Field(default_factory=list)
    type: list[str] = Field(default_factory=list)
    assignee_ids: list[str] = Field(default_factory=list)
    creator_ids: list[str] = Field(default_factory=list)
    athlete_ids: list[str] = Field(default_factory=list)

    @field_validator("status", "priority", "type", mode="before")
    def lower_keys(cls, value):
        return _as_keys(value)

    @field_validator("assignee_ids", "creator_ids", "athlete_ids", mode="before")
    def plain_ids(cls, value):
        return _as_ids(value)


class ViewSpec(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: str = DEFAULT_SORT_DIRECTION
    filters: ViewFilters = Field(default_factory=ViewFilters)
    hide_completed: bool = False
    search: str = ""
    manual_order: Optional[list[str]] = None

    @field_validator("sort_field", mode="before")
    def known_sort_field(cls, value):
        value = normalize_key(value)
        return value if value in SORT_FIELDS else DEFAULT_SORT_FIELD

    @field_validator("sort_direction", mode="before")
    def known_direction(cls, value):
        value = normalize_key(value)
        return value if value in SORT_DIRECTIONS else DEFAULT_SORT_DIRECTION

    @field_validator("filters", mode="before")
    def filters_or_empty(cls, value):
        return ViewFilters() if value is None else value

    @field_validator("hide_completed", mode="before")
    def flag(cls, value):
        if isinstance(value, str):
            return normalize_key(value) in _TRUE_STRINGS
        return bool(value)

    @field_validator("search", mode="before")
    def text_or_empty(cls, value):
        return value if isinstance(value, str) else ""

    @field_validator("manual_order", mode="before")
    def order_or_none(cls, value):
        return _as_ids(value) or None


def task_value(task: Any, field: str) -> Any:
    """Read ``field`` from a record or from a raw (camelCase or snake_case) mapping."""
    if isinstance(task, Mapping):
        if field in task:
            return task[field]
        return task.get(to_camel(field))
    return getattr(task, field, None)


def _matches(task: Any, spec: ViewSpec) -> bool:
    status = normalize_key(task_value(task, "status"))
    if spec.hide_completed and status == "completed":
        return False

    needle = spec.search.strip().lower()
    if needle:
        name = task_value(task, "name")
        if not isinstance(name, str) or needle not in name.lower():
            return False

    filters = spec.filters
    if filters.status and status not in filters.status:
        return False
    if filters.priority and normalize_key(task_value(task, "priority")) not in filters.priority:
        return False
    if filters.type and normalize_key(task_value(task, "type")) not in filters.type:
        return False
    if filters.assignee_ids and (task_value(task, "assignee_id") or "") not in filters.assignee_ids:
        return False
    if filters.creator_ids and (task_value(task, "creator_id") or "") not in filters.creator_ids:
        return False
    if filters.athlete_ids:
        related = task_value(task, "related_athlete_ids") or []
        if not any(athlete_id in filters.athlete_ids for athlete_id in related):
            return False
    return True


def _text(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def sort_key(task: Any, field: str):
    if field == "priority":
        return format_priority(task_value(task, "priority")).sort_weight
    if field == "deadline":
        return epoch_millis(task_value(task, "deadline"))
    return _text(task_value(task, field))


def apply_manual_order(tasks: Sequence[Any], manual_order: Iterable[str]) -> list[Any]:
    by_id: dict[str, Any] = {}
    for task in tasks:
        by_id.setdefault(str(task_value(task, "id")), task)

    ordered = []
    placed = set()
    for task_id in manual_order:
        if task_id in by_id and task_id not in placed:
            ordered.append(by_id[task_id])
            placed.add(task_id)

    # untracked tasks keep their relative order at the end
    ordered.extend(task for task in tasks if str(task_value(task, "id")) not in placed)
    return ordered


def derive_view(tasks: Optional[Iterable[Any]], spec: Optional[ViewSpec] = None) -> list[Any]:
    spec = spec or ViewSpec()
    visible = [task for task in (tasks or []) if task is not None and _matches(task, spec)]

    if spec.manual_order:
        return apply_manual_order(visible, spec.manual_order)

    return sorted(
        visible,
        key=lambda task: sort_key(task, spec.sort_field),
        reverse=spec.sort_direction == "desc",
    )


# ---------------- ordering state machine ----------------


def sort_mode(spec: ViewSpec) -> str:
    return MANUALLY_ORDERED if spec.manual_order else SORTED


def on_column_sort_click(spec: ViewSpec, field: str) -> ViewSpec:
    """Header click: always back to ``Sorted``.

    Clicking the active column while already sorted flips the direction.
    """
    field = normalize_key(field)
    if field not in SORT_FIELDS:
        field = DEFAULT_SORT_FIELD

    direction = DEFAULT_SORT_DIRECTION
    if sort_mode(spec) == SORTED and spec.sort_field == field:
        direction = "desc" if spec.sort_direction == "asc" else "asc"

    return spec.model_copy(update={"sort_field": field, "sort_direction": direction, "manual_order": None})


def on_drag_reorder(spec: ViewSpec, visible_ids: Sequence[str], from_index: int, to_index: int) -> ViewSpec:
    """Drop of the row at ``from_index`` onto ``to_index`` of the rendered list.

    Ids tracked by the previous manual order but not currently visible (hidden
    by a filter) are kept after the visible ones.
    """
    order = [str(task_id) for task_id in visible_ids]
    if not 0 <= from_index < len(order):
        return spec

    to_index = max(0, min(to_index, len(order) - 1))
    moved = order.pop(from_index)
    order.insert(to_index, moved)

    shown = set(order)
    hidden = [task_id for task_id in (spec.manual_order or []) if task_id not in shown]
    return spec.model_copy(update={"manual_order": order + hidden})


def rename_task_id(spec: ViewSpec, old_id: str, new_id: str) -> ViewSpec:
    if not spec.manual_order or old_id not in spec.manual_order:
        return spec
    return spec.model_copy(
        update={"manual_order": [new_id if task_id == old_id else task_id for task_id in spec.manual_order]}
    )


# ---------------- kanban board ----------------

KANBAN_SORTS = ("deadline", "priority")

# (column key, title, status written when a card is dropped on the column)
KANBAN_LAYOUT = (
    ("new", "To-Do", "new"),
    ("in_progress", "In Progress", "in_progress"),
    ("pending", "Pending", "blocked"),
    ("completed", "Completed", "completed"),
)


class KanbanColumn(NamedTuple):
    key: str
    title: str
    drop_status: str
    tasks: list


def _kanban_sort_key(task: Any, sort_by: str):
    if sort_by == "priority":
        return -format_priority(task_value(task, "priority")).sort_weight
    deadline = parse_datetime(task_value(task, "deadline"))
    if deadline is None:
        return (1, 0)
    return (0, epoch_millis(deadline))


def kanban_columns(
    tasks: Optional[Iterable[Any]], sort_by: str = "deadline", spec: Optional[ViewSpec] = None
) -> list[KanbanColumn]:
    """Group tasks into the four board columns by status bucket.

    Cards are sorted inside each column by priority (highest first) or by
    deadline (earliest first, undated cards last). Only the filtering part of
    ``spec`` applies; the board has no manual order.
    """
    sort_by = normalize_key(sort_by)
    if sort_by not in KANBAN_SORTS:
        sort_by = DEFAULT_SORT_FIELD

    grouped: dict[str, list] = {key: [] for key, _, _ in KANBAN_LAYOUT}
    for task in tasks or []:
        if task is None or (spec is not None and not _matches(task, spec)):
            continue
        grouped[status_bucket(task_value(task, "status"))].append(task)

    return [
        KanbanColumn(key, title, drop_status, sorted(grouped[key], key=lambda task: _kanban_sort_key(task, sort_by)))
        for key, title, drop_status in KANBAN_LAYOUT
    ]


def kanban_drop_status(tasks: Iterable[Any], dragged_id: str, over_id: str) -> Optional[str]:
    """Status a card takes when dropped on a column key or on another card.

    ``None`` when the drop does not move the card to a different column.
    """
    by_id = {str(task_value(task, "id")): task for task in tasks if task is not None}
    dragged = by_id.get(dragged_id)
    if dragged is None or over_id == dragged_id:
        return None

    drop_statuses = {key: drop_status for key, _, drop_status in KANBAN_LAYOUT}
    if over_id in drop_statuses:
        target_column = over_id
        target = drop_statuses[over_id]
    elif over_id in by_id:
        target = normalize_key(task_value(by_id[over_id], "status"))
        target_column = status_bucket(target)
        if target not in TASK_STATUSES:
            target = drop_statuses[target_column]
    else:
        return None

    if target_column == status_bucket(task_value(dragged, "status")):
        return None
    return target
