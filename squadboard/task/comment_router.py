# squadboard/task/comment_router.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from squadboard.database import get_db
from squadboard.models.comment import TaskComment
from squadboard.models.task import Task
from squadboard.schemas.comment_schema import CommentCreate, CommentRead

router = APIRouter(tags=["comments"])


def _require_task(db: Session, task_id: str) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("/tasks/{task_id}/comments", response_model=list[CommentRead])
def list_comments(task_id: str, db: Session = Depends(get_db)):
    _require_task(db, task_id)
    return (
        db.query(TaskComment)
        .filter(TaskComment.task_id == task_id)
        .order_by(TaskComment.created_at)
        .all()
    )


@router.post("/tasks/{task_id}/comments", response_model=CommentRead, status_code=201)
def create_comment(task_id: str, data: CommentCreate, db: Session = Depends(get_db)):
    _require_task(db, task_id)

    comment = TaskComment(id=str(uuid.uuid4()), task_id=task_id, **data.model_dump())
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(comment_id: str, db: Session = Depends(get_db)):
    comment = db.get(TaskComment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")

    db.delete(comment)
    db.commit()
    return Response(status_code=204)
