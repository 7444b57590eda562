# squadboard/task/task_router.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from squadboard.database import get_db
from squadboard.schemas.task_schema import TaskCreate, TaskUpdate, TaskRead
from squadboard.task import task_service
from squadboard.task.task_service import UnknownAthleteError

logger = logging.getLogger("squadboard.task")


router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


@router.get("", response_model=list[TaskRead])
def get_all_tasks(db: Session = Depends(get_db)):
    return task_service.list_tasks(db)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(task_id: str, db: Session = Depends(get_db)):
    task = task_service.get_task(db, task_id)
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.post("", response_model=TaskRead, status_code=201)
def create_task(data: TaskCreate, db: Session = Depends(get_db)):
    try:
        return task_service.create_task(db, data)
    except UnknownAthleteError as exc:
        db.rollback()
        logger.warning("task_create_rejected", extra={"athlete_ids": exc.athlete_ids})
        raise HTTPException(status_code=422, detail=str(exc))


# PUT and PATCH share the sparse-update semantics
@router.api_route("/{task_id}", methods=["PUT", "PATCH"], response_model=TaskRead)
def update_task(task_id: str, data: TaskUpdate, db: Session = Depends(get_db)):
    try:
        task = task_service.update_task(db, task_id, data)
    except UnknownAthleteError as exc:
        db.rollback()
        logger.warning("task_update_rejected", extra={"task_id": task_id, "athlete_ids": exc.athlete_ids})
        raise HTTPException(status_code=422, detail=str(exc))

    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: str, db: Session = Depends(get_db)):
    task_service.delete_task(db, task_id)
    return Response(status_code=204)
