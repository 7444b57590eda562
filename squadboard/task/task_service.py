# squadboard/task/task_service.py
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from squadboard.database import utcnow
from squadboard.models.comment import TaskComment
from squadboard.models.person import Person
from squadboard.models.task import Task, TaskAthlete
from squadboard.schemas.task_schema import TaskCreate, TaskRead, TaskUpdate

logger = logging.getLogger("squadboard.task")


class UnknownAthleteError(ValueError):
    """Raised when related athlete ids do not resolve to athletes."""

    def __init__(self, athlete_ids: list[str]):
        self.athlete_ids = athlete_ids
        super().__init__(f"Unknown athlete ids: {', '.join(athlete_ids)}")


def _next_updated_at(previous: Optional[datetime]) -> datetime:
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _athlete_ids_by_task(db: Session, task_ids: list[str]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    if not task_ids:
        return grouped
    rows = db.query(TaskAthlete).filter(TaskAthlete.task_id.in_(task_ids)).all()
    for row in rows:
        grouped[row.task_id].append(row.athlete_id)
    return grouped


def assemble(task: Task, athlete_ids: Iterable[str]) -> TaskRead:
    read = TaskRead.model_validate(task)
    read.related_athlete_ids = sorted(athlete_ids)
    return read


def _require_athletes(db: Session, athlete_ids: list[str]) -> list[str]:
    wanted = list(dict.fromkeys(athlete_ids))
    if not wanted:
        return wanted
    found = {
        person.id
        for person in db.query(Person).filter(Person.id.in_(wanted), Person.type == "athlete").all()
    }
    missing = [athlete_id for athlete_id in wanted if athlete_id not in found]
    if missing:
        raise UnknownAthleteError(missing)
    return wanted


def _replace_athletes(db: Session, task_id: str, athlete_ids: list[str]) -> None:
    db.query(TaskAthlete).filter(TaskAthlete.task_id == task_id).delete(synchronize_session=False)
    for athlete_id in athlete_ids:
        db.add(TaskAthlete(task_id=task_id, athlete_id=athlete_id))


def list_tasks(db: Session) -> list[TaskRead]:
    tasks = db.query(Task).order_by(Task.created_at).all()
    grouped = _athlete_ids_by_task(db, [task.id for task in tasks])
    return [assemble(task, grouped.get(task.id, [])) for task in tasks]


def get_task(db: Session, task_id: str) -> Optional[TaskRead]:
    task = db.get(Task, task_id)
    if not task:
        return None
    return assemble(task, _athlete_ids_by_task(db, [task_id]).get(task_id, []))


def create_task(db: Session, data: TaskCreate) -> TaskRead:
    athlete_ids = _require_athletes(db, data.related_athlete_ids)

    now = utcnow()
    task = Task(
        id=str(uuid.uuid4()),
        name=data.name,
        description=data.description,
        type=data.type,
        status=data.status,
        priority=data.priority,
        deadline=data.deadline,
        assignee_id=data.assignee_id,
        creator_id=data.creator_id or data.assignee_id,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.flush()
    _replace_athletes(db, task.id, athlete_ids)
    db.commit()
    db.refresh(task)

    logger.info("task_created", extra={"task_id": task.id, "athlete_count": len(athlete_ids)})
    return assemble(task, athlete_ids)


def update_task(db: Session, task_id: str, data: TaskUpdate) -> Optional[TaskRead]:
    task = db.get(Task, task_id)
    if not task:
        return None

    changes = data.changes()
    athlete_ids = changes.pop("related_athlete_ids", None)
    if athlete_ids is not None:
        athlete_ids = _require_athletes(db, athlete_ids)

    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = _next_updated_at(task.updated_at)

    if athlete_ids is not None:
        _replace_athletes(db, task_id, athlete_ids)

    db.commit()
    db.refresh(task)

    logger.info(
        "task_updated",
        extra={"task_id": task_id, "fields": sorted(changes), "athletes_replaced": athlete_ids is not None},
    )
    return get_task(db, task_id)


def delete_task(db: Session, task_id: str) -> bool:
    db.query(TaskAthlete).filter(TaskAthlete.task_id == task_id).delete(synchronize_session=False)
    db.query(TaskComment).filter(TaskComment.task_id == task_id).delete(synchronize_session=False)
    deleted = db.query(Task).filter(Task.id == task_id).delete(synchronize_session=False)
    db.commit()

    logger.info("task_deleted", extra={"task_id": task_id, "existed": bool(deleted)})
    return bool(deleted)
